"""FastAPI application entrypoint. No business logic; only wiring, middleware and startup."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from newsboard.api import router as api_router
from newsboard.core.config import Settings, settings, warn_on_dev_fallbacks
from newsboard.core.database import session_scope
from newsboard.core.errors import UnhandledErrorMiddleware, install_error_handlers
from newsboard.core.middleware import RequestLogMiddleware, SecurityHeadersMiddleware
from newsboard.core.rate_limit import RateLimiter, RateLimitMiddleware
from newsboard.services.auth import ensure_admin_user

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Warn about dev fallbacks and seed the admin account before serving."""
    warn_on_dev_fallbacks(settings)
    with session_scope() as db:
        ensure_admin_user(db, settings)
    logger.info("NewsBoard API started: environment=%s", settings.APP_ENV)
    yield


def create_app(settings: Settings) -> FastAPI:
    """Build the app. Rate limiters live on app.state so they can be inspected and reset."""
    app = FastAPI(
        title="NewsBoard API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.auth_limiter = RateLimiter(
        settings.AUTH_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS
    )
    app.state.api_limiter = RateLimiter(
        settings.API_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS
    )

    # Starlette runs the last-added middleware first.
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.auth_limiter,
        message="Too many login attempts, please try again later.",
        paths=(
            f"{settings.API_PREFIX}/auth/login",
            f"{settings.API_PREFIX}/auth/register",
        ),
        skip_successful=True,
        trust_proxy=settings.TRUST_PROXY,
    )
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.api_limiter,
        message="Too many requests from this IP, please try again later.",
        prefixes=(f"{settings.API_PREFIX}/",),
        trust_proxy=settings.TRUST_PROXY,
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(RequestLogMiddleware, prefix=settings.API_PREFIX)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["Content-Type"],
        )

    install_error_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "NewsBoard API"}

    return app


app = create_app(settings)
