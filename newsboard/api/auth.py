"""Session login/logout and auth dependencies (get_current_user)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from newsboard.core.database import get_db
from newsboard.core.errors import UsernameTakenError
from newsboard.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from newsboard.services import auth as auth_service
from newsboard.services import storage

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_USER_KEY = "user_id"


def _start_session(request: Request, user_id: int) -> None:
    """Replace whatever the session held with the authenticated user's id."""
    request.session.clear()
    request.session[SESSION_USER_KEY] = user_id


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require a session for an existing user and return it. Raises 401 otherwise."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not isinstance(user_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    user = storage.get_user(db, user_id)
    if user is None:
        request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return CurrentUser.model_validate(user)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create a regular account and log it in."""
    try:
        user = auth_service.register_user(db, body.username, body.password)
    except UsernameTakenError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken",
        )
    _start_session(request, user.id)
    return UserResponse(user=CurrentUser.model_validate(user))


@router.post("/login", response_model=UserResponse)
def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Authenticate with username and password; the session cookie carries the user id."""
    user = auth_service.authenticate(db, body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    _start_session(request, user.id)
    logger.info("User logged in: user_id=%s", user.id)
    return UserResponse(user=CurrentUser.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    request.session.clear()
    logger.info("User logged out: user_id=%s", current_user.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
def read_current_user(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse(user=current_user)
