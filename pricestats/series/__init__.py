"""Series domain types.

Re-exports the public types for convenient imports:
    from pricestats.series import Point, OverlayKind, TimeRange
"""

from pricestats.series.types import (
    BAND_COMPONENTS,
    LONGEST_LOOKBACK,
    BandPoint,
    Category,
    DataGranularity,
    IndicatorMethod,
    OverlayKind,
    OverlaySet,
    Point,
    Series,
    TimeRange,
)

__all__ = [
    "BAND_COMPONENTS",
    "LONGEST_LOOKBACK",
    "BandPoint",
    "Category",
    "DataGranularity",
    "IndicatorMethod",
    "OverlayKind",
    "OverlaySet",
    "Point",
    "Series",
    "TimeRange",
]
