"""SqlSeriesStore -- SeriesStore backed by SQLAlchemy async sessions.

Timestamps are stored as fixed-width ISO 8601 UTC strings, so ordering and
range filters work directly on the text column. ``replace_all`` runs the
delete and the bulk insert inside one transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricestats.errors import PersistenceError
from pricestats.models.series import SeriesPointModel
from pricestats.series.types import Category, Point, Series
from pricestats.utils.time import format_timestamp, parse_timestamp

log = structlog.get_logger()


def _to_point(row: SeriesPointModel) -> Point:
    return Point(timestamp=parse_timestamp(row.timestamp), value=row.value)


def _to_rows(category: Category, points: Sequence[Point]) -> list[dict[str, object]]:
    return [
        {
            "category": category.value,
            "timestamp": format_timestamp(p.timestamp),
            "value": float(p.value),
        }
        for p in points
    ]


class SqlSeriesStore:
    """SeriesStore implementation over an ``async_sessionmaker``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch(
        self,
        category: Category,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> Series:
        stmt = (
            select(SeriesPointModel)
            .where(SeriesPointModel.category == category.value)
            .order_by(SeriesPointModel.timestamp, SeriesPointModel.id)
        )
        if since is not None:
            stmt = stmt.where(SeriesPointModel.timestamp >= format_timestamp(since))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_point(row) for row in result.scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {category.value}: {e}") from e

    async def latest(self, category: Category) -> Point | None:
        return await self._edge(category, newest=True)

    async def oldest(self, category: Category) -> Point | None:
        return await self._edge(category, newest=False)

    async def _edge(self, category: Category, *, newest: bool) -> Point | None:
        order = (
            (SeriesPointModel.timestamp.desc(), SeriesPointModel.id.desc())
            if newest
            else (SeriesPointModel.timestamp, SeriesPointModel.id)
        )
        stmt = (
            select(SeriesPointModel)
            .where(SeriesPointModel.category == category.value)
            .order_by(*order)
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {category.value}: {e}") from e
        return _to_point(row) if row is not None else None

    async def replace_all(self, category: Category, points: Sequence[Point]) -> None:
        rows = _to_rows(category, points)
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(SeriesPointModel).where(
                        SeriesPointModel.category == category.value
                    )
                )
                if rows:
                    await session.execute(insert(SeriesPointModel), rows)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to replace {category.value}: {e}") from e
        log.info("store_replaced", category=category.value, point_count=len(rows))

    async def append(self, category: Category, points: Sequence[Point]) -> None:
        rows = _to_rows(category, points)
        if not rows:
            return
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(insert(SeriesPointModel), rows)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to append {category.value}: {e}") from e
        log.debug("store_appended", category=category.value, point_count=len(rows))

    async def delete(self, category: Category) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(SeriesPointModel).where(
                        SeriesPointModel.category == category.value
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete {category.value}: {e}") from e
        log.info("store_deleted", category=category.value)
