"""Refresh policy: decide whether the cached series can be trusted."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from pricestats.config import RefreshConfig
from pricestats.series.types import LONGEST_LOOKBACK

REASON_EMPTY = "empty"
REASON_STALE = "stale"
REASON_SHALLOW = "insufficient_history"


@dataclass(frozen=True)
class RefreshPolicy:
    """Staleness and history-depth thresholds.

    ``min_history_span`` should cover the longest overlay lookback so a
    refresh keeps happening until the 200-week MA can be computed.
    """

    stale_after: timedelta = timedelta(hours=1)
    min_history_span: timedelta = timedelta(days=LONGEST_LOOKBACK)

    @classmethod
    def from_config(cls, config: RefreshConfig) -> RefreshPolicy:
        return cls(
            stale_after=timedelta(seconds=config.stale_after_seconds),
            min_history_span=timedelta(days=config.min_history_days),
        )

    def refresh_reason(
        self,
        latest: datetime | None,
        oldest: datetime | None,
        now: datetime,
    ) -> str | None:
        """Why a refresh is needed, or None if the cache is good."""
        if latest is None or oldest is None:
            return REASON_EMPTY
        if now - latest > self.stale_after:
            return REASON_STALE
        if latest - oldest < self.min_history_span:
            return REASON_SHALLOW
        return None

    def needs_refresh(
        self,
        latest: datetime | None,
        oldest: datetime | None,
        now: datetime,
    ) -> bool:
        return self.refresh_reason(latest, oldest, now) is not None
