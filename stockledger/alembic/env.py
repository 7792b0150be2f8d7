"""
Migration environment.

The database URL comes from stockledger settings (DATABASE_URL / .env),
not from alembic.ini; the repo root is put on sys.path by
``prepend_sys_path`` in alembic.ini.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from stockledger.app.core.config import settings
from stockledger.app.db.base import Base
from stockledger.app.db.models import models_v1  # noqa: F401  registers the tables
from stockledger.app.db.session import create_db_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

database_url = settings.database_url
config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=_is_sqlite(database_url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_db_engine(database_url)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                # SQLite cannot ALTER constraints in place
                render_as_batch=_is_sqlite(database_url),
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
