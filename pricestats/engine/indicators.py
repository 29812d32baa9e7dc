"""Moving-average indicators over an ordered point series.

SMA and EMA are small incremental accumulators with O(1) per update.
The module-level ``sma``/``ema`` functions drive a fresh accumulator over a
whole series, so they are pure: no state survives between calls.
"""

from __future__ import annotations

from collections import deque

from pricestats.series.types import IndicatorMethod, Point, Series


def _check_period(name: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{name} period must be >= 1, got {period}")


class SMA:
    """Simple Moving Average via ring buffer with running sum.

    Note: Running-sum approach may accumulate negligible float drift over very
    long series. The longest window used here is 1400 points.
    """

    __slots__ = ("_buf", "_period", "_sum")

    def __init__(self, period: int) -> None:
        _check_period("SMA", period)
        self._period = period
        self._buf: deque[float] = deque(maxlen=period)
        self._sum: float = 0.0

    def update(self, value: float) -> float | None:
        """Add a value, evicting the oldest if at capacity. Returns the SMA."""
        if len(self._buf) == self._period:
            self._sum -= self._buf[0]
        self._buf.append(value)
        self._sum += value
        return self.value

    @property
    def value(self) -> float | None:
        """Current SMA, or None if not warm."""
        if len(self._buf) < self._period:
            return None
        return self._sum / self._period

    @property
    def is_warm(self) -> bool:
        return len(self._buf) >= self._period


class EMA:
    """Exponential Moving Average seeded with the SMA of the first window.

    Smoothing factor ``k = 2 / (period + 1)``. Until ``period`` values have
    been seen the EMA is not warm; the first warm value is the arithmetic mean
    of those values, and each later value is ``x * k + prev * (1 - k)``.
    """

    __slots__ = ("_count", "_k", "_period", "_seed_sum", "_value")

    def __init__(self, period: int) -> None:
        _check_period("EMA", period)
        self._period = period
        self._k = 2.0 / (period + 1)
        self._count = 0
        self._seed_sum = 0.0
        self._value: float | None = None

    def update(self, value: float) -> float | None:
        """Add a value. Returns the EMA, or None if not warm."""
        self._count += 1
        if self._value is not None:
            self._value = value * self._k + self._value * (1.0 - self._k)
        else:
            self._seed_sum += value
            if self._count == self._period:
                self._value = self._seed_sum / self._period
        return self._value

    @property
    def value(self) -> float | None:
        return self._value

    @property
    def is_warm(self) -> bool:
        return self._value is not None


def _run(accumulator: SMA | EMA, series: Series) -> Series:
    result: Series = []
    for point in series:
        value = accumulator.update(point.value)
        if value is not None:
            result.append(Point(timestamp=point.timestamp, value=value))
    return result


def sma(series: Series, period: int) -> Series:
    """Simple moving average of ``series`` (oldest first).

    The first output point is at input index ``period - 1``; output length is
    ``len(series) - period + 1``. Returns an empty list when there is not
    enough history.

    Raises:
        ValueError: If period < 1.
    """
    acc = SMA(period)
    if len(series) < period:
        return []
    return _run(acc, series)


def ema(series: Series, period: int) -> Series:
    """Exponential moving average of ``series``, SMA-seeded.

    Same output alignment and insufficient-history rule as ``sma``.

    Raises:
        ValueError: If period < 1.
    """
    acc = EMA(period)
    if len(series) < period:
        return []
    return _run(acc, series)


def compute(method: IndicatorMethod, series: Series, period: int) -> Series:
    """Dispatch to ``sma`` or ``ema``."""
    if method is IndicatorMethod.EMA:
        return ema(series, period)
    return sma(series, period)
