"""Pydantic request/response schemas."""

from newsboard.schemas.article import (
    ArticleCreate,
    ArticleResponse,
    ArticleWithUsername,
)
from newsboard.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from newsboard.schemas.health import HealthResponse

__all__ = [
    "ArticleCreate",
    "ArticleResponse",
    "ArticleWithUsername",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "UserResponse",
]
