"""Error types and the JSON error handlers installed on the app.

Every error response body has the shape {"message": str}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class StorageError(Exception):
    """A database operation failed (connectivity, constraint, or driver error)."""


class UsernameTakenError(StorageError):
    """A user with the requested username already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Username already taken: {username!r}")
        self.username = username


def first_validation_message(exc: RequestValidationError) -> str:
    """Human-readable message for the first violated constraint."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    ctx = err.get("ctx") or {}
    # Messages raised by our own validators are already written for users.
    if err.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
    field = ".".join(loc)
    msg = err.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": first_validation_message(exc)},
    )


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "Storage error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Turn exceptions escaping a route into the generic 500 body.

    Installed innermost, so the response still passes through the header
    middlewares (security headers, CORS) on its way out.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def install_error_handlers(app: FastAPI) -> None:
    # The Exception handler only sees errors raised outside UnhandledErrorMiddleware.
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
