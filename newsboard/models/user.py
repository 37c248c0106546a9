"""ORM model for registered users and their role."""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from newsboard.models.base import Base, utcnow


class Role(str, enum.Enum):
    """Closed set of account roles; stored as its string value."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """
    Registered account. Never updated in place.

    role: 'admin' or 'user' (see Role)
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value, server_default=Role.USER.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    articles = relationship("Article", back_populates="owner", passive_deletes=True)
