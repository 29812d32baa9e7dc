"""Refresh coordinator -- cache-first loading with a network refresh policy.

Owns the presentable state for one category: the cached full history, the
windowed display series, the overlay set and the latest value. Every state
change is pushed to subscribers as a frozen CoordinatorState snapshot.

All mutations happen on the owning event loop. ``load()`` is guarded so at
most one refresh is in flight; a second call while loading is a no-op.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from pricestats.coordinator.policy import RefreshPolicy
from pricestats.engine.overlays import clip_to_window, compose_overlays
from pricestats.errors import PersistenceError, ProviderError
from pricestats.provider.series_provider import SeriesProvider
from pricestats.series.types import (
    Category,
    DataGranularity,
    OverlayKind,
    OverlaySet,
    Point,
    Series,
    TimeRange,
)
from pricestats.store.series_store import SeriesStore
from pricestats.utils.logging import (
    new_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from pricestats.utils.time import utc_now

log = structlog.get_logger()

DEFAULT_OVERLAYS = frozenset({OverlayKind.MA_200_WEEK, OverlayKind.SUPPORT_BAND})


@dataclass(frozen=True)
class CoordinatorState:
    """Read-only view of the coordinator, handed to subscribers."""

    category: Category
    time_range: TimeRange
    enabled_overlays: frozenset[OverlayKind]
    display_series: tuple[Point, ...] = ()
    overlay_set: OverlaySet = field(default_factory=OverlaySet)
    latest_value: float | None = None
    is_loading: bool = False
    last_error: str | None = None

    @property
    def band_lower(self) -> list[Point]:
        return self.overlay_set.band_lower

    @property
    def band_upper(self) -> list[Point]:
        return self.overlay_set.band_upper


Listener = Callable[[CoordinatorState], None]


class RefreshCoordinator:
    """Cache-first loader for one category's series and overlays.

    Design decisions:
    - The full history is always what gets stored and refreshed; the display
      range only clips what is shown.
    - Hourly ranges (24H, 1W) additionally fetch a short window that is shown
      in memory and never stored, so daily history is not mixed with hourly.
    - A failed refresh never clears data that was already presentable.
    """

    def __init__(
        self,
        store: SeriesStore,
        provider: SeriesProvider,
        *,
        category: Category = Category.PRICE,
        policy: RefreshPolicy | None = None,
        enabled_overlays: Iterable[OverlayKind] = DEFAULT_OVERLAYS,
        time_range: TimeRange = TimeRange.MONTH,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._provider = provider
        self._category = category
        self._policy = policy if policy is not None else RefreshPolicy()
        self._enabled: frozenset[OverlayKind] = frozenset(enabled_overlays)
        self._time_range = time_range
        self._clock = clock
        self._listeners: list[Listener] = []

        self._full_history: Series = []
        self._display_series: Series = []
        self._window_override: Series | None = None
        self._window_start: datetime | None = None
        self._overlay_set = OverlaySet()
        self._spot: Point | None = None
        self._is_loading = False
        self._last_error: str | None = None

    # --- Read-only state ---

    @property
    def category(self) -> Category:
        return self._category

    @property
    def time_range(self) -> TimeRange:
        return self._time_range

    @property
    def enabled_overlays(self) -> frozenset[OverlayKind]:
        return self._enabled

    @property
    def full_history(self) -> Series:
        return list(self._full_history)

    @property
    def display_series(self) -> Series:
        return list(self._display_series)

    @property
    def overlay_set(self) -> OverlaySet:
        return self._overlay_set

    @property
    def band_lower(self) -> Series:
        return self._overlay_set.band_lower

    @property
    def band_upper(self) -> Series:
        return self._overlay_set.band_upper

    @property
    def latest_value(self) -> float | None:
        """Newest known value: spot quote, display tail or history tail."""
        candidates = [self._spot]
        if self._display_series:
            candidates.append(self._display_series[-1])
        if self._full_history:
            candidates.append(self._full_history[-1])
        known = [p for p in candidates if p is not None]
        if not known:
            return None
        return max(known, key=lambda p: p.timestamp).value

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def snapshot(self) -> CoordinatorState:
        return CoordinatorState(
            category=self._category,
            time_range=self._time_range,
            enabled_overlays=self._enabled,
            display_series=tuple(self._display_series),
            overlay_set=self._overlay_set,
            latest_value=self.latest_value,
            is_loading=self._is_loading,
            last_error=self._last_error,
        )

    # --- Observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                log.exception("listener_failed", category=self._category.value)

    # --- Policy ---

    def needs_refresh(self) -> bool:
        """True when the cache is empty, stale, or too shallow for overlays."""
        return self._refresh_reason() is not None

    def _refresh_reason(self) -> str | None:
        latest = self._full_history[-1].timestamp if self._full_history else None
        oldest = self._full_history[0].timestamp if self._full_history else None
        return self._policy.refresh_reason(latest, oldest, self._clock())

    # --- Operations ---

    async def load(self, time_range: TimeRange | None = None) -> None:
        """Show cached data, then refresh from the provider if needed.

        Returns immediately (without fetching) when a load is in flight.
        Provider and store-write failures end up in ``last_error``; the
        coordinator always has presentable state when this returns.
        """
        if self._is_loading:
            log.debug("load_skipped_in_flight", category=self._category.value)
            return

        self._is_loading = True
        token = set_correlation_id(new_correlation_id())
        if time_range is not None:
            self._time_range = time_range
        self._window_start = self._time_range.window_start(self._clock())
        self._window_override = None
        self._last_error = None
        self._notify()

        try:
            cached = await self._read_store()
            self._apply_history(cached if cached is not None else [])
            self._notify()

            reason = self._refresh_reason()
            if reason is not None:
                await self._refresh(reason)

            if self._time_range.granularity is DataGranularity.HOURLY:
                await self._load_short_window()
        finally:
            self._is_loading = False
            self._notify()
            reset_correlation_id(token)

    def toggle_overlay(self, kind: OverlayKind) -> bool:
        """Flip an overlay on or off and recompute in memory.

        Touches neither the network nor the store. Returns the new state.
        """
        enabled = kind not in self._enabled
        if enabled:
            self._enabled = self._enabled | {kind}
        else:
            self._enabled = self._enabled - {kind}
        self._recompute_overlays()
        log.info("overlay_toggled", overlay=kind.value, enabled=enabled)
        self._notify()
        return enabled

    # --- Internals ---

    async def _read_store(self) -> Series | None:
        """Full cached history, or None if the read failed."""
        try:
            return await self._store.fetch(self._category)
        except PersistenceError as e:
            log.warning(
                "cache_read_failed",
                category=self._category.value,
                error=str(e),
            )
            return None

    def _apply_history(self, history: Series) -> None:
        self._full_history = history
        if self._window_override is not None:
            self._display_series = self._window_override
        else:
            self._display_series = clip_to_window(history, self._window_start)
        self._recompute_overlays()

    def _recompute_overlays(self) -> None:
        self._overlay_set = compose_overlays(
            self._full_history,
            self._enabled,
            self._window_start,
        )

    async def _refresh(self, reason: str) -> None:
        log.info(
            "refresh_started",
            category=self._category.value,
            reason=reason,
            cached_points=len(self._full_history),
        )
        history_result, spot_result = await asyncio.gather(
            self._provider.fetch_full_history(self._category),
            self._provider.fetch_latest(self._category),
            return_exceptions=True,
        )
        for result in (history_result, spot_result):
            if isinstance(result, ProviderError):
                self._last_error = str(result)
                log.warning(
                    "refresh_failed",
                    category=self._category.value,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                return
            if isinstance(result, BaseException):
                raise result
        assert not isinstance(history_result, BaseException)
        assert not isinstance(spot_result, BaseException)

        self._spot = spot_result
        try:
            await self._store.replace_all(self._category, history_result)
        except PersistenceError as e:
            # Keep showing the fetched data even though it was not saved.
            self._last_error = str(e)
            log.error(
                "store_replace_failed",
                category=self._category.value,
                error=str(e),
            )
            self._apply_history(history_result)
            return

        stored = await self._read_store()
        self._apply_history(stored if stored is not None else history_result)
        log.info(
            "refresh_completed",
            category=self._category.value,
            point_count=len(self._full_history),
            latest_value=self.latest_value,
        )

    async def _load_short_window(self) -> None:
        try:
            window = await self._provider.fetch_range(
                self._category,
                self._time_range.days,
            )
        except ProviderError as e:
            self._last_error = str(e)
            log.warning(
                "short_window_fetch_failed",
                category=self._category.value,
                time_range=self._time_range.value,
                error=str(e),
            )
            return
        self._window_override = window
        self._display_series = window
        log.debug(
            "short_window_loaded",
            category=self._category.value,
            time_range=self._time_range.value,
            point_count=len(window),
        )
