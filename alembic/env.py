"""
Alembic environment for the NewsBoard schema (users, articles).

The database URL comes from NewsBoard settings unless overridden on the
command line:  alembic -x url=sqlite:///newsboard.db upgrade head
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from newsboard.core.config import settings
from newsboard.core.database import enable_sqlite_foreign_keys
from newsboard.models import Base

config = context.config
# alembic.ini carries the logging sections; an ini without them is tolerated.
if config.config_file_name is not None:
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        pass

target_metadata = Base.metadata


def get_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or settings.database_url


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    url = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_url()
    connectable = create_engine(url, poolclass=NullPool)
    if _is_sqlite(url):
        event.listen(connectable, "connect", enable_sqlite_foreign_keys)
    with connectable.connect() as connection:
        do_run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
