"""API routes, mounted under settings.API_PREFIX."""

from fastapi import APIRouter

from newsboard.api import articles, auth, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(articles.router, prefix="/articles", tags=["articles"])
