"""
Engine construction and session scoping.

PostgreSQL in deployment; SQLite is accepted for local runs and tests. On
SQLite foreign keys are switched on per connection, so deleting a user
cascades to their articles the same way it does on PostgreSQL.
"""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from newsboard.core.config import settings

logger = logging.getLogger(__name__)

_SQLITE_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:
    """Connect hook: SQLite ignores FOREIGN KEY clauses unless this pragma is set."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create the engine for a database URL.

    In-memory SQLite shares one connection across threads, otherwise every
    connection would see its own empty database.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, echo=echo)
    kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if url in _SQLITE_MEMORY_URLS:
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(url, **kwargs)
    event.listen(sqlite_engine, "connect", enable_sqlite_foreign_keys)
    return sqlite_engine


engine = build_engine(settings.database_url, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """A session for work outside a request (startup seeding, CLI). Always closed."""
    db = factory()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """Request dependency: one session per request."""
    with session_scope() as db:
        yield db


def check_db_connected(db: Session) -> bool:
    """True if a trivial query succeeds; failures are logged, not raised."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database check failed: %s", e)
        return False
    return True
