"""Request/response schemas for submitted articles."""

from datetime import datetime

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from newsboard.core.security import TITLE_MIN_LEN, strip_tags

_url_adapter = TypeAdapter(AnyUrl)

# Schemes that run code when a stored link is followed in a browser.
BLOCKED_URL_SCHEMES = frozenset({"javascript", "vbscript", "data"})


class ArticleCreate(BaseModel):
    """Submission body. The URL is stored exactly as sent once it validates."""

    title: str = Field(..., description="Title (at least 5 characters)")
    url: str = Field(..., description="Absolute URL (scheme required)")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if len(v) < TITLE_MIN_LEN:
            raise ValueError(f"Title must be at least {TITLE_MIN_LEN} characters")
        cleaned = strip_tags(v)
        if len(cleaned) < TITLE_MIN_LEN:
            raise ValueError(
                f"Title must be at least {TITLE_MIN_LEN} characters without markup"
            )
        return cleaned

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        url = v.strip()
        try:
            parsed = _url_adapter.validate_python(url)
        except ValidationError:
            raise ValueError("Must be a valid URL") from None
        if parsed.scheme.lower() in BLOCKED_URL_SCHEMES:
            raise ValueError(f"URL scheme '{parsed.scheme}' is not allowed")
        return url


class ArticleResponse(BaseModel):
    """Persisted article; serialized with camelCase keys (userId, createdAt)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    title: str
    url: str
    user_id: int
    created_at: datetime


class ArticleWithUsername(ArticleResponse):
    """Listing entry: article plus its owner's username ("Unknown" if the owner is gone)."""

    username: str
