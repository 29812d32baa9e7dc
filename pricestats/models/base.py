"""SQLAlchemy base, async engine setup, and SQLite pragmas."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

DEFAULT_BUSY_TIMEOUT_MS = 5000


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def set_sqlite_pragmas(
    dbapi_connection: Any,
    connection_record: Any,
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
) -> None:
    """Set SQLite pragmas on every new connection.

    SQLite pragmas are per-connection, not per-database, so they must be
    set every time a connection is opened.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def register_engine_events(
    engine: Engine,
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
) -> None:
    """Register SQLite pragma listener on a (sync) engine."""
    event.listen(
        engine,
        "connect",
        partial(set_sqlite_pragmas, busy_timeout_ms=busy_timeout_ms),
    )


def create_engine_for_path(
    db_path: str,
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
) -> AsyncEngine:
    """Create an aiosqlite engine for a file path (or ":memory:")."""
    if db_path == ":memory:":
        url = "sqlite+aiosqlite://"
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(url, echo=False)
    register_engine_events(engine.sync_engine, busy_timeout_ms)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the SQL series store."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables (development and tests; production uses Alembic)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
