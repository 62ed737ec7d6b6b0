"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from rate_my_decision.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def configure_sqlite(engine: Engine) -> Engine:
    """Make SQLite transactions behave like the production store.

    Foreign keys (and therefore cascades) are switched on, and every transaction
    starts with ``BEGIN IMMEDIATE`` so concurrent writers queue behind the
    database lock the way row locks queue them on PostgreSQL.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:  # pragma: no cover - driver hook
        # Hand transaction control to SQLAlchemy instead of pysqlite.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:  # pragma: no cover - driver hook
        connection.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url`` with the dialect tweaks applied."""
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)
    return configure_sqlite(engine)


# Ensure model modules are imported so that metadata is populated when create_all runs.
import rate_my_decision.models  # noqa: E402,F401

engine = build_engine(settings.database_url_sync, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
