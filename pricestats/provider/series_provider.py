"""SeriesProvider protocol -- abstract interface for remote series sources.

All provider implementations (CoinGecko, fake) must satisfy this protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pricestats.series.types import Category, Point, Series


@runtime_checkable
class SeriesProvider(Protocol):
    """Async interface for remote series history and spot values.

    Implementations must support ``async with`` for lifecycle management.
    Failures raise TransportError (HTTP status or connectivity) or
    DecodeError (malformed payload). Nothing is retried here; retry policy
    belongs to the caller.
    """

    async def connect(self) -> None:
        """Open the underlying connection pool."""
        ...

    async def disconnect(self) -> None:
        """Release connections."""
        ...

    async def fetch_full_history(self, category: Category) -> Series:
        """Entire available history, ascending by timestamp."""
        ...

    async def fetch_range(self, category: Category, span_days: int) -> Series:
        """Trailing ``span_days`` of history, ascending by timestamp.

        Short spans may come back at a finer granularity (e.g. hourly) than
        the full history.
        """
        ...

    async def fetch_latest(self, category: Category) -> Point:
        """Current spot value."""
        ...

    async def __aenter__(self) -> SeriesProvider:
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        ...
