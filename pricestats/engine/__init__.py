"""Engine layer: indicator calculation and overlay composition."""

from pricestats.engine.indicators import EMA, SMA, compute, ema, sma
from pricestats.engine.overlays import (
    OverlayCompositor,
    align_band,
    clip_to_window,
    compose_overlays,
)

__all__ = [
    "EMA",
    "SMA",
    "OverlayCompositor",
    "align_band",
    "clip_to_window",
    "compose_overlays",
    "compute",
    "ema",
    "sma",
]
