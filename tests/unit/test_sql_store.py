"""Tests for SqlSeriesStore against a real aiosqlite database."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from pricestats.errors import PersistenceError
from pricestats.models.base import create_session_factory
from pricestats.series.types import Category
from pricestats.store.series_store import SeriesStore
from pricestats.store.sql import SqlSeriesStore
from tests.factories import make_daily_series, make_point, make_series


class TestProtocol:
    def test_satisfies_series_store(self, sql_store: SqlSeriesStore) -> None:
        assert isinstance(sql_store, SeriesStore)


class TestReadEmpty:
    async def test_fetch_empty(self, sql_store: SqlSeriesStore) -> None:
        assert await sql_store.fetch(Category.PRICE) == []

    async def test_edges_empty(self, sql_store: SqlSeriesStore) -> None:
        assert await sql_store.latest(Category.PRICE) is None
        assert await sql_store.oldest(Category.PRICE) is None


class TestReplaceAll:
    async def test_round_trips_points(self, sql_store: SqlSeriesStore) -> None:
        series = make_daily_series(10)
        await sql_store.replace_all(Category.PRICE, series)
        assert await sql_store.fetch(Category.PRICE) == series

    async def test_replaces_previous_contents(self, sql_store: SqlSeriesStore) -> None:
        await sql_store.replace_all(Category.PRICE, make_daily_series(10))
        newer = make_daily_series(3, start=datetime(2025, 1, 1, tzinfo=UTC))

        await sql_store.replace_all(Category.PRICE, newer)

        assert await sql_store.fetch(Category.PRICE) == newer

    async def test_empty_replace_clears(self, sql_store: SqlSeriesStore) -> None:
        await sql_store.replace_all(Category.PRICE, make_daily_series(3))
        await sql_store.replace_all(Category.PRICE, [])
        assert await sql_store.fetch(Category.PRICE) == []

    async def test_categories_are_isolated(self, sql_store: SqlSeriesStore) -> None:
        prices = make_daily_series(5)
        caps = make_daily_series(4, base=1e9)
        await sql_store.replace_all(Category.PRICE, prices)
        await sql_store.replace_all(Category.MARKET_CAP, caps)

        await sql_store.replace_all(Category.PRICE, [])

        assert await sql_store.fetch(Category.MARKET_CAP) == caps

    async def test_unordered_input_read_back_ascending(
        self, sql_store: SqlSeriesStore
    ) -> None:
        series = make_daily_series(5)
        await sql_store.replace_all(Category.PRICE, list(reversed(series)))
        assert await sql_store.fetch(Category.PRICE) == series


class TestFetchFilters:
    async def test_since_is_inclusive(self, sql_store: SqlSeriesStore) -> None:
        series = make_daily_series(10)
        await sql_store.replace_all(Category.PRICE, series)

        result = await sql_store.fetch(Category.PRICE, since=series[7].timestamp)

        assert result == series[7:]

    async def test_limit_keeps_oldest(self, sql_store: SqlSeriesStore) -> None:
        series = make_daily_series(10)
        await sql_store.replace_all(Category.PRICE, series)
        assert await sql_store.fetch(Category.PRICE, limit=3) == series[:3]

    async def test_since_with_other_timezone(self, sql_store: SqlSeriesStore) -> None:
        series = make_daily_series(3)
        await sql_store.replace_all(Category.PRICE, series)
        plus_two = timezone(timedelta(hours=2))
        since = series[1].timestamp.astimezone(plus_two)

        assert await sql_store.fetch(Category.PRICE, since=since) == series[1:]


class TestEdges:
    async def test_latest_and_oldest(self, sql_store: SqlSeriesStore) -> None:
        series = make_daily_series(6)
        await sql_store.replace_all(Category.PRICE, series)
        assert await sql_store.latest(Category.PRICE) == series[-1]
        assert await sql_store.oldest(Category.PRICE) == series[0]


class TestAppendAndDelete:
    async def test_append_keeps_existing(self, sql_store: SqlSeriesStore) -> None:
        first = make_series([1.0, 2.0])
        more = make_series([3.0], start=first[-1].timestamp + timedelta(days=1))
        await sql_store.replace_all(Category.PRICE, first)

        await sql_store.append(Category.PRICE, more)

        assert await sql_store.fetch(Category.PRICE) == first + more

    async def test_append_nothing_is_noop(self, sql_store: SqlSeriesStore) -> None:
        await sql_store.append(Category.PRICE, [])
        assert await sql_store.fetch(Category.PRICE) == []

    async def test_delete(self, sql_store: SqlSeriesStore) -> None:
        await sql_store.replace_all(Category.PRICE, [make_point()])
        await sql_store.delete(Category.PRICE)
        assert await sql_store.latest(Category.PRICE) is None


class TestFailures:
    async def test_missing_table_raises_persistence_error(
        self, engine: AsyncEngine
    ) -> None:
        async with engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE series_point")
        store = SqlSeriesStore(create_session_factory(engine))

        with pytest.raises(PersistenceError):
            await store.fetch(Category.PRICE)
        with pytest.raises(PersistenceError):
            await store.replace_all(Category.PRICE, [make_point()])
