"""SeriesStore protocol -- abstract interface for local series persistence.

All store implementations (SQLite, in-memory fake) must satisfy this protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from pricestats.series.types import Category, Point, Series


@runtime_checkable
class SeriesStore(Protocol):
    """Async persistence of points by category.

    Every method raises PersistenceError on failure. ``replace_all`` must be
    atomic with respect to concurrent readers of the same category: a reader
    sees either the old contents or the new ones, never a mix.
    """

    async def fetch(
        self,
        category: Category,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> Series:
        """Points for a category, ascending by timestamp.

        Args:
            category: Series identifier.
            since: Only points with timestamp >= since.
            limit: Maximum number of points (oldest first).
        """
        ...

    async def latest(self, category: Category) -> Point | None:
        """Newest point, or None if nothing is stored."""
        ...

    async def oldest(self, category: Category) -> Point | None:
        """Oldest point, or None if nothing is stored."""
        ...

    async def replace_all(self, category: Category, points: Sequence[Point]) -> None:
        """Delete everything for the category and insert ``points``."""
        ...

    async def append(self, category: Category, points: Sequence[Point]) -> None:
        """Insert ``points`` alongside the existing ones."""
        ...

    async def delete(self, category: Category) -> None:
        """Remove all points for the category."""
        ...
