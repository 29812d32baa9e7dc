"""Overlay compositor: full history + enabled kinds -> windowed OverlaySet.

Indicators are always computed over the entire retained history and only
then cut down to the visible window, so long lookbacks stay correct for
short display ranges.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import structlog

from pricestats.engine.indicators import compute
from pricestats.series.types import (
    BAND_COMPONENTS,
    BandPoint,
    IndicatorMethod,
    OverlayKind,
    OverlaySet,
    Series,
)

log = structlog.get_logger()


def clip_to_window(series: Series, window_start: datetime | None) -> Series:
    """Points with ``timestamp >= window_start`` (all points if None)."""
    if window_start is None:
        return list(series)
    return [p for p in series if p.timestamp >= window_start]


def align_band(sma_series: Series, ema_series: Series) -> list[BandPoint]:
    """Pair two series on exact timestamp matches.

    Walks the SMA series in order and emits ``(min, max)`` wherever the EMA
    series has a point at the same timestamp. Unmatched points are dropped.
    Both inputs must derive from the same history.
    """
    ema_by_ts = {p.timestamp: p.value for p in ema_series}
    band: list[BandPoint] = []
    for point in sma_series:
        other = ema_by_ts.get(point.timestamp)
        if other is None:
            continue
        band.append(
            BandPoint(
                timestamp=point.timestamp,
                lower=min(point.value, other),
                upper=max(point.value, other),
            )
        )
    return band


class OverlayCompositor:
    """Computes an OverlaySet from a full history snapshot.

    Each (method, period) pair is computed at most once per ``compose`` call,
    so the band and the individually requested SMA/EMA lines always share the
    same values.
    """

    def __init__(self, history: Series) -> None:
        self._history = history
        self._cache: dict[tuple[IndicatorMethod, int], Series] = {}

    def _full(self, kind: OverlayKind) -> Series:
        key = kind.indicator
        if key not in self._cache:
            method, period = key
            self._cache[key] = compute(method, self._history, period)
        return self._cache[key]

    def compose(
        self,
        enabled: Iterable[OverlayKind],
        window_start: datetime | None = None,
    ) -> OverlaySet:
        enabled_set = frozenset(enabled)
        lines: dict[OverlayKind, Series] = {}
        band: list[BandPoint] | None = None
        unavailable: list[str] = []

        for kind in OverlayKind:
            if kind not in enabled_set or kind.is_band:
                continue
            full = self._full(kind)
            if not full:
                unavailable.append(kind.value)
                continue
            lines[kind] = clip_to_window(full, window_start)

        if OverlayKind.SUPPORT_BAND in enabled_set:
            sma_kind, ema_kind = BAND_COMPONENTS
            sma_full = self._full(sma_kind)
            ema_full = self._full(ema_kind)
            if sma_full and ema_full:
                band = align_band(
                    clip_to_window(sma_full, window_start),
                    clip_to_window(ema_full, window_start),
                )
            else:
                unavailable.append(OverlayKind.SUPPORT_BAND.value)

        result = OverlaySet(lines=lines, band=band)
        log.debug(
            "overlays_composed",
            history_points=len(self._history),
            computed=sorted(k.value for k in result.kinds),
            unavailable=unavailable,
        )
        return result


def compose_overlays(
    history: Series,
    enabled: Iterable[OverlayKind],
    window_start: datetime | None = None,
) -> OverlaySet:
    """One-shot composition over ``history``."""
    return OverlayCompositor(history).compose(enabled, window_start)
