"""Series domain types shared across the price-stats system.

Frozen dataclasses for value objects. A Series is a plain list of Points
ordered oldest-first; indicator functions assume that ordering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class Category(str, Enum):
    """Logical series identifier under which points are stored and fetched."""

    PRICE = "price"
    MARKET_CAP = "market_cap"
    TOTAL_VOLUME = "total_volume"


class IndicatorMethod(str, Enum):
    """Moving-average flavour used by an overlay."""

    SMA = "sma"
    EMA = "ema"


class DataGranularity(str, Enum):
    """Sampling interval the upstream provider returns for a range."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def seconds(self) -> int:
        return _GRANULARITY_SECONDS[self]


_GRANULARITY_SECONDS: dict[DataGranularity, int] = {
    DataGranularity.HOURLY: 3_600,
    DataGranularity.DAILY: 86_400,
    DataGranularity.WEEKLY: 604_800,
}


class TimeRange(str, Enum):
    """Caller-selected display window (lookback from now)."""

    DAY = "24H"
    WEEK = "1W"
    MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    YEAR = "1Y"
    TWO_YEARS = "2Y"
    ALL_TIME = "All"

    @property
    def days(self) -> int:
        return _RANGE_DAYS[self]

    @property
    def granularity(self) -> DataGranularity:
        if self in (TimeRange.DAY, TimeRange.WEEK):
            return DataGranularity.HOURLY
        if self is TimeRange.ALL_TIME:
            return DataGranularity.WEEKLY
        return DataGranularity.DAILY

    def window_start(self, now: datetime) -> datetime:
        """Oldest timestamp visible in this range."""
        return now - timedelta(days=self.days)


_RANGE_DAYS: dict[TimeRange, int] = {
    TimeRange.DAY: 1,
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.THREE_MONTHS: 90,
    TimeRange.SIX_MONTHS: 180,
    TimeRange.YEAR: 365,
    TimeRange.TWO_YEARS: 730,
    TimeRange.ALL_TIME: 5000,
}

# Lookback periods, in daily data points.
PERIOD_200_WEEK = 200 * 7
PERIOD_200_DAY = 200
PERIOD_50_DAY = 50
PERIOD_20_WEEK = 20 * 7
PERIOD_21_WEEK = 21 * 7


class OverlayKind(str, Enum):
    """Technical-indicator overlays drawn over the price series."""

    MA_200_WEEK = "200-Week MA"
    MA_200_DAY = "200-Day MA"
    MA_50_DAY = "50-Day MA"
    MA_20_WEEK = "20-Week MA"
    EMA_21_WEEK = "21-Week EMA"
    SUPPORT_BAND = "Bull Market Support Band"

    @property
    def is_band(self) -> bool:
        return self is OverlayKind.SUPPORT_BAND

    @property
    def indicator(self) -> tuple[IndicatorMethod, int]:
        """(method, period) for a line overlay.

        Raises:
            ValueError: For the band, which is derived from two lines.
        """
        if self.is_band:
            raise ValueError(f"{self.value} is a band, not a single indicator")
        return _LINE_INDICATORS[self]

    @property
    def lookback(self) -> int:
        """Daily points of history required before this overlay has values."""
        if self.is_band:
            return max(kind.lookback for kind in BAND_COMPONENTS)
        return _LINE_INDICATORS[self][1]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_LINE_INDICATORS: dict[OverlayKind, tuple[IndicatorMethod, int]] = {
    OverlayKind.MA_200_WEEK: (IndicatorMethod.SMA, PERIOD_200_WEEK),
    OverlayKind.MA_200_DAY: (IndicatorMethod.SMA, PERIOD_200_DAY),
    OverlayKind.MA_50_DAY: (IndicatorMethod.SMA, PERIOD_50_DAY),
    OverlayKind.MA_20_WEEK: (IndicatorMethod.SMA, PERIOD_20_WEEK),
    OverlayKind.EMA_21_WEEK: (IndicatorMethod.EMA, PERIOD_21_WEEK),
}

# The support band spans these two lines: (sma component, ema component).
BAND_COMPONENTS: tuple[OverlayKind, OverlayKind] = (
    OverlayKind.MA_20_WEEK,
    OverlayKind.EMA_21_WEEK,
)

_DESCRIPTIONS: dict[OverlayKind, str] = {
    OverlayKind.MA_200_WEEK: (
        "200-week moving average. Long-term trend indicator and historical "
        "support level in bull markets."
    ),
    OverlayKind.MA_200_DAY: (
        "200-day moving average. Important medium-term trend indicator."
    ),
    OverlayKind.MA_50_DAY: "50-day moving average. Short-term trend indicator.",
    OverlayKind.MA_20_WEEK: (
        "20-week simple moving average. Component of Bull Market Support Band."
    ),
    OverlayKind.EMA_21_WEEK: (
        "21-week exponential moving average. Component of Bull Market Support Band."
    ),
    OverlayKind.SUPPORT_BAND: (
        "Band between 20-week SMA and 21-week EMA. Bull markets typically hold "
        "above this range."
    ),
}

LONGEST_LOOKBACK = max(kind.lookback for kind in OverlayKind)


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class Point:
    """Single observation of a series."""

    timestamp: datetime
    value: float


Series = list[Point]


@dataclass(frozen=True)
class BandPoint:
    """Support-band bounds at one timestamp. lower <= upper."""

    timestamp: datetime
    lower: float
    upper: float


@dataclass(frozen=True)
class OverlaySet:
    """Computed overlays for the visible window.

    A kind missing from ``lines`` (or ``band`` being None) means the overlay
    is not available: either not enabled or not enough history yet. That is
    distinct from a present-but-empty series.
    """

    lines: dict[OverlayKind, Series] = field(default_factory=dict)
    band: list[BandPoint] | None = None

    def __contains__(self, kind: object) -> bool:
        if kind is OverlayKind.SUPPORT_BAND:
            return self.band is not None
        return kind in self.lines

    def get(self, kind: OverlayKind) -> Series | None:
        """Line series for a kind, or None when unavailable."""
        if kind.is_band:
            raise ValueError("Use band_lower/band_upper for the support band")
        return self.lines.get(kind)

    @property
    def band_lower(self) -> Series:
        if self.band is None:
            return []
        return [Point(timestamp=b.timestamp, value=b.lower) for b in self.band]

    @property
    def band_upper(self) -> Series:
        if self.band is None:
            return []
        return [Point(timestamp=b.timestamp, value=b.upper) for b in self.band]

    @property
    def kinds(self) -> frozenset[OverlayKind]:
        present = set(self.lines)
        if self.band is not None:
            present.add(OverlayKind.SUPPORT_BAND)
        return frozenset(present)
