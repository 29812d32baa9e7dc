"""InMemorySeriesStore -- dict-backed SeriesStore for tests and previews.

Each category maps to an immutable tuple. Writers build a new tuple and swap
it in, so readers always see a complete snapshot.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pricestats.errors import PersistenceError
from pricestats.series.types import Category, Point, Series


class InMemorySeriesStore:
    """In-memory SeriesStore.

    Set ``fail_reads`` / ``fail_writes`` to simulate persistence failures.
    """

    def __init__(self, seed: dict[Category, Sequence[Point]] | None = None) -> None:
        self._data: dict[Category, tuple[Point, ...]] = {}
        for category, points in (seed or {}).items():
            self._data[category] = self._sorted(points)
        self.fail_reads = False
        self.fail_writes = False
        self.replace_count = 0

    @staticmethod
    def _sorted(points: Sequence[Point]) -> tuple[Point, ...]:
        # Stable sort keeps insertion order for equal timestamps.
        return tuple(sorted(points, key=lambda p: p.timestamp))

    def _check_read(self) -> None:
        if self.fail_reads:
            raise PersistenceError("Simulated read failure")

    def _check_write(self) -> None:
        if self.fail_writes:
            raise PersistenceError("Simulated write failure")

    async def fetch(
        self,
        category: Category,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> Series:
        self._check_read()
        points = self._data.get(category, ())
        if since is not None:
            points = tuple(p for p in points if p.timestamp >= since)
        if limit is not None:
            points = points[:limit]
        return list(points)

    async def latest(self, category: Category) -> Point | None:
        self._check_read()
        points = self._data.get(category, ())
        return points[-1] if points else None

    async def oldest(self, category: Category) -> Point | None:
        self._check_read()
        points = self._data.get(category, ())
        return points[0] if points else None

    async def replace_all(self, category: Category, points: Sequence[Point]) -> None:
        self._check_write()
        self._data[category] = self._sorted(points)
        self.replace_count += 1

    async def append(self, category: Category, points: Sequence[Point]) -> None:
        self._check_write()
        self._data[category] = self._sorted([*self._data.get(category, ()), *points])

    async def delete(self, category: Category) -> None:
        self._check_write()
        self._data.pop(category, None)
