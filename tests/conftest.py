"""Shared test fixtures for pricestats."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pricestats.models.base import (
    create_all,
    create_engine_for_path,
    create_session_factory,
)
from pricestats.provider.fake import FakeSeriesProvider
from pricestats.store.memory import InMemorySeriesStore
from pricestats.store.sql import SqlSeriesStore


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Drop PRICESTATS_* variables and run from an empty directory.

    Keeps the developer's environment and .env file out of config-driven tests.
    """
    for key in list(os.environ):
        if key.startswith("PRICESTATS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """File-backed aiosqlite engine with all tables created."""
    eng = create_engine_for_path(str(tmp_path / "pricestats-test.db"))
    await create_all(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlSeriesStore:
    return SqlSeriesStore(session_factory)


@pytest.fixture
def memory_store() -> InMemorySeriesStore:
    return InMemorySeriesStore()


@pytest.fixture
def fake_provider() -> FakeSeriesProvider:
    return FakeSeriesProvider()
