"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsboard.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    strip_tags,
)
from newsboard.models.user import Role


class RegisterRequest(BaseModel):
    """New account credentials. Username markup is stripped before storage."""

    username: str = Field(..., description="Username (3-255 characters)")
    password: str = Field(..., description="Password (8-128 characters)")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if len(v) < USERNAME_MIN_LEN:
            raise ValueError(f"Username must be at least {USERNAME_MIN_LEN} characters")
        if len(v) > USERNAME_MAX_LEN:
            raise ValueError(f"Username must be at most {USERNAME_MAX_LEN} characters")
        cleaned = strip_tags(v)
        if len(cleaned) < USERNAME_MIN_LEN:
            raise ValueError(
                f"Username must be at least {USERNAME_MIN_LEN} characters without markup"
            )
        return cleaned

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < PASSWORD_MIN_LEN:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
        if len(v) > PASSWORD_MAX_LEN:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_LEN} characters")
        return v


class LoginRequest(BaseModel):
    """
    Credentials for login.

    Missing, empty or over-long values are not validation errors: they fail
    authentication with the same 401 as a wrong password.
    """

    username: str = Field(default="", description="Username")
    password: str = Field(default="", description="Password")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role), re-read from the database on every request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class UserResponse(BaseModel):
    """Body of register, login and current-user responses."""

    user: CurrentUser


class MessageResponse(BaseModel):
    message: str
