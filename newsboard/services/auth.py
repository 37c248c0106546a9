"""Registration, credential checks, admin bootstrap and delete authorization."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from newsboard.core.errors import UsernameTakenError
from newsboard.core.security import (
    PASSWORD_MAX_LEN,
    USERNAME_MAX_LEN,
    hash_password,
    verify_password,
)
from newsboard.models import Article, Role, User
from newsboard.schemas.auth import CurrentUser
from newsboard.services import storage

if TYPE_CHECKING:
    from newsboard.core.config import Settings

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"

# Compared against when the username does not exist, so both failure paths cost one bcrypt check.
_DUMMY_HASH = hash_password("newsboard-timing-equalizer")


def register_user(db: Session, username: str, password: str) -> User:
    """
    Create a regular user from already-validated input.
    Raises UsernameTakenError if the username is in use.
    """
    if storage.get_user_by_username(db, username) is not None:
        raise UsernameTakenError(username)
    user = storage.create_user(db, username, hash_password(password), role=Role.USER)
    logger.info("Registered user: user_id=%s", user.id)
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    """
    Return the user when the credentials match, otherwise None.

    Unknown usernames and wrong passwords are indistinguishable to the caller.
    """
    if not (0 < len(username) <= USERNAME_MAX_LEN and 0 < len(password) <= PASSWORD_MAX_LEN):
        return None
    user = storage.get_user_by_username(db, username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def can_delete_article(user: CurrentUser, article: Article) -> bool:
    """Admins may delete any article; users only their own."""
    if user.role is Role.ADMIN:
        return True
    if user.role is Role.USER:
        return article.user_id == user.id
    raise ValueError(f"Unhandled role: {user.role!r}")


def ensure_admin_user(db: Session, settings: "Settings") -> bool:
    """
    Create the bootstrap "admin" account if it does not exist.

    Returns True if the account was created. Idempotent: safe to run on every start.
    """
    if storage.get_user_by_username(db, ADMIN_USERNAME) is not None:
        return False
    try:
        storage.create_user(
            db,
            ADMIN_USERNAME,
            hash_password(settings.admin_password),
            role=Role.ADMIN,
        )
    except UsernameTakenError:
        # Another worker created it first.
        return False
    logger.info("Admin user created with username: %s", ADMIN_USERNAME)
    if settings.ADMIN_PASSWORD is None:
        logger.warning(
            "Admin user uses the default development password. Set ADMIN_PASSWORD for production."
        )
    return True
