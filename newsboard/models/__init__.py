"""SQLAlchemy ORM models."""

from newsboard.models.article import Article
from newsboard.models.base import Base
from newsboard.models.user import Role, User

__all__ = ["Article", "Base", "Role", "User"]
