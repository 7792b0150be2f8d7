from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from stockledger.app.core.config import settings


def _serialize_sqlite_writers(engine: Engine) -> None:
    """
    SQLite has no row locks: every transaction takes the write lock up
    front (BEGIN IMMEDIATE) so read-then-write sequences cannot interleave.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # SQLAlchemy emits BEGIN itself, see _on_begin
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False, "timeout": settings.db_pool_timeout},
        )
        _serialize_sqlite_writers(engine)
        return engine

    return create_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        isolation_level="READ COMMITTED",
    )


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
