"""Local series persistence.

Re-exports the protocol and implementations:
    from pricestats.store import SeriesStore, SqlSeriesStore
"""

from pricestats.store.memory import InMemorySeriesStore
from pricestats.store.series_store import SeriesStore
from pricestats.store.sql import SqlSeriesStore

__all__ = [
    "InMemorySeriesStore",
    "SeriesStore",
    "SqlSeriesStore",
]
