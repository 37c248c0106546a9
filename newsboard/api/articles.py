"""Article listing, submission and deletion."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from newsboard.api.auth import get_current_user
from newsboard.core.database import get_db
from newsboard.schemas.article import ArticleCreate, ArticleResponse, ArticleWithUsername
from newsboard.schemas.auth import CurrentUser, MessageResponse
from newsboard.services import storage
from newsboard.services.auth import can_delete_article

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[ArticleWithUsername])
def list_articles(
    db: Annotated[Session, Depends(get_db)],
) -> list[ArticleWithUsername]:
    """All articles, newest first, each with its owner's username."""
    return storage.get_articles(db)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
def create_article(
    body: ArticleCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ArticleResponse:
    article = storage.create_article(db, body.title, body.url, current_user.id)
    logger.info("Article created: article_id=%s user_id=%s", article.id, current_user.id)
    return ArticleResponse.model_validate(article)


@router.delete("/{article_id}", response_model=MessageResponse)
def delete_article(
    article_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete an article. Only its owner or an admin may do this."""
    article = storage.get_article_by_id(db, article_id)
    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Article not found",
        )
    if not can_delete_article(current_user, article):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - You can only delete your own articles",
        )
    storage.delete_article(db, article_id)
    logger.info(
        "Article deleted: article_id=%s by user_id=%s role=%s",
        article_id,
        current_user.id,
        current_user.role.value,
    )
    return MessageResponse(message="Article deleted successfully")
