"""Persistence adapter: user and article reads and single-row writes."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from newsboard.core.errors import StorageError, UsernameTakenError
from newsboard.models import Article, Role, User
from newsboard.schemas.article import ArticleWithUsername

logger = logging.getLogger(__name__)

# Shown in listings for articles whose owner row no longer exists.
UNKNOWN_USERNAME = "Unknown"


@contextmanager
def _storage_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise any database failure as StorageError."""
    try:
        yield
    except StorageError:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage operation failed: action=%s error=%s", action, type(e).__name__)
        raise StorageError(f"Failed to {action}") from e


def get_user(db: Session, user_id: int) -> User | None:
    with _storage_errors(db, "load user"):
        return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    """Exact (case-sensitive) username lookup."""
    with _storage_errors(db, "load user"):
        return db.query(User).filter(User.username == username).first()


def create_user(
    db: Session,
    username: str,
    password_hash: str,
    role: Role = Role.USER,
) -> User:
    """
    Insert a user. Raises UsernameTakenError if the username exists,
    StorageError for any other database failure.
    """
    user = User(username=username, password_hash=password_hash, role=role.value)
    with _storage_errors(db, "create user"):
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if get_user_by_username(db, username) is not None:
                raise UsernameTakenError(username) from e
            raise
        db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> bool:
    """
    Delete a user and every article they own in one transaction.
    Returns False if the user does not exist.
    """
    with _storage_errors(db, "delete user"):
        articles_deleted = (
            db.query(Article)
            .filter(Article.user_id == user_id)
            .delete(synchronize_session=False)
        )
        users_deleted = (
            db.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    if users_deleted:
        logger.info("Deleted user: user_id=%s articles_deleted=%s", user_id, articles_deleted)
    return users_deleted > 0


def get_articles(db: Session) -> list[ArticleWithUsername]:
    """All articles with their owner's username, newest first."""
    with _storage_errors(db, "list articles"):
        rows = (
            db.query(Article, User.username)
            .outerjoin(User, Article.user_id == User.id)
            .order_by(Article.created_at.desc(), Article.id.desc())
            .all()
        )
    return [
        ArticleWithUsername(
            id=article.id,
            title=article.title,
            url=article.url,
            user_id=article.user_id,
            created_at=article.created_at,
            username=username or UNKNOWN_USERNAME,
        )
        for article, username in rows
    ]


def get_article_by_id(db: Session, article_id: int) -> Article | None:
    with _storage_errors(db, "load article"):
        return db.query(Article).filter(Article.id == article_id).first()


def create_article(db: Session, title: str, url: str, user_id: int) -> Article:
    article = Article(title=title, url=url, user_id=user_id)
    with _storage_errors(db, "create article"):
        db.add(article)
        db.commit()
        db.refresh(article)
    return article


def delete_article(db: Session, article_id: int) -> None:
    with _storage_errors(db, "delete article"):
        db.query(Article).filter(Article.id == article_id).delete(synchronize_session=False)
        db.commit()
