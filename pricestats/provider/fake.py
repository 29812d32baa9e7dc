"""FakeSeriesProvider -- in-memory SeriesProvider for testing.

Supply canned history at construction. Calls are counted per method, a
failure can be injected with ``fail_with``, and ``gate`` lets a test hold
fetches in flight until it sets the event.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Self

from pricestats.errors import DecodeError
from pricestats.series.types import Category, Point, Series


class FakeSeriesProvider:
    """In-memory SeriesProvider for testing."""

    def __init__(
        self,
        history: dict[Category, Series] | None = None,
        ranges: dict[Category, Series] | None = None,
        spot: dict[Category, Point] | None = None,
    ) -> None:
        self.history: dict[Category, Series] = history if history is not None else {}
        self.ranges: dict[Category, Series] = ranges if ranges is not None else {}
        self.spot: dict[Category, Point] = spot if spot is not None else {}
        self.calls: Counter[str] = Counter()
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None
        self._connected = False

    async def _enter_call(self, name: str) -> None:
        self.calls[name] += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def fetch_full_history(self, category: Category) -> Series:
        await self._enter_call("fetch_full_history")
        return list(self.history.get(category, []))

    async def fetch_range(self, category: Category, span_days: int) -> Series:
        await self._enter_call("fetch_range")
        return list(self.ranges.get(category, []))

    async def fetch_latest(self, category: Category) -> Point:
        await self._enter_call("fetch_latest")
        if category in self.spot:
            return self.spot[category]
        history = self.history.get(category)
        if not history:
            raise DecodeError(f"No spot value for {category.value}")
        return history[-1]

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.disconnect()
