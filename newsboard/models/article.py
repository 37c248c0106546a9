"""ORM model for submitted links."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import relationship

from newsboard.models.base import Base, utcnow


class Article(Base):
    """
    A submitted link. Owned by exactly one user for its whole lifetime.

    Rows are removed with their owner (ON DELETE CASCADE).
    """

    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    owner = relationship("User", back_populates="articles")
