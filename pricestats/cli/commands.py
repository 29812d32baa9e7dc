"""Click CLI commands for pricestats."""

from __future__ import annotations

import asyncio
import sys

import click

from pricestats.config import AppConfig
from pricestats.coordinator.policy import RefreshPolicy
from pricestats.coordinator.refresh import CoordinatorState, RefreshCoordinator
from pricestats.models.base import (
    create_all,
    create_engine_for_path,
    create_session_factory,
)
from pricestats.provider.coingecko import CoinGeckoProvider
from pricestats.series.types import Category, OverlayKind, TimeRange
from pricestats.store.sql import SqlSeriesStore
from pricestats.utils.logging import setup_logging


@click.group()
def cli() -> None:
    """pricestats: cached price history with moving-average overlays."""


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = AppConfig()

    click.echo("=== pricestats Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo(f"DB Path:      {cfg.db_path}")
    click.echo("")

    click.echo("[Refresh]")
    click.echo(f"  Stale After:       {cfg.refresh.stale_after_seconds}s")
    click.echo(f"  Min History:       {cfg.refresh.min_history_days} days")
    click.echo("")

    click.echo("[Provider]")
    click.echo(f"  Base URL:   {cfg.provider.base_url}")
    click.echo(f"  Coin:       {cfg.provider.coin_id}")
    click.echo(f"  Currency:   {cfg.provider.vs_currency}")
    click.echo("")

    click.echo("[Display]")
    click.echo(f"  Range:      {cfg.display.default_range.value}")
    overlays = ", ".join(sorted(k.value for k in cfg.display.default_overlays))
    click.echo(f"  Overlays:   {overlays or '(none)'}")


@cli.command()
def overlays() -> None:
    """List available overlays."""
    for kind in OverlayKind:
        click.echo(f"{kind.value:<26} {kind.lookback:>5}d  {kind.description}")


@cli.command("init-db")
def init_db() -> None:
    """Create the series table in the configured database."""
    cfg = AppConfig()
    asyncio.run(_init_db(cfg))
    click.echo(f"Database ready: {cfg.db_path}")


async def _init_db(cfg: AppConfig) -> None:
    engine = create_engine_for_path(cfg.db_path, cfg.db_busy_timeout_ms)
    try:
        await create_all(engine)
    finally:
        await engine.dispose()


@cli.command()
@click.option(
    "--range",
    "range_",
    type=click.Choice([r.value for r in TimeRange]),
    default=None,
    help="Display range (default from config).",
)
@click.option(
    "--overlay",
    "overlay_names",
    multiple=True,
    type=click.Choice([k.value for k in OverlayKind]),
    help="Overlay to compute (repeatable; default from config).",
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.PRICE.value,
    help="Series to load (default: price).",
)
def show(range_: str | None, overlay_names: tuple[str, ...], category: str) -> None:
    """Load the series (refreshing if stale) and print a summary."""
    cfg = AppConfig()
    setup_logging(level=cfg.log_level, log_format=cfg.log_format)

    time_range = TimeRange(range_) if range_ else cfg.display.default_range
    enabled = (
        frozenset(OverlayKind(name) for name in overlay_names)
        if overlay_names
        else cfg.display.default_overlays
    )

    state = asyncio.run(_load(cfg, Category(category), time_range, enabled))
    _print_state(state)
    if state.last_error and not state.display_series:
        sys.exit(1)


async def _load(
    cfg: AppConfig,
    category: Category,
    time_range: TimeRange,
    enabled: frozenset[OverlayKind],
) -> CoordinatorState:
    """Run one coordinator load against the SQLite store and CoinGecko."""
    engine = create_engine_for_path(cfg.db_path, cfg.db_busy_timeout_ms)
    try:
        await create_all(engine)
        store = SqlSeriesStore(create_session_factory(engine))
        async with CoinGeckoProvider(cfg.provider) as provider:
            coordinator = RefreshCoordinator(
                store,
                provider,
                category=category,
                policy=RefreshPolicy.from_config(cfg.refresh),
                enabled_overlays=enabled,
                time_range=time_range,
            )
            await coordinator.load()
            return coordinator.snapshot()
    finally:
        await engine.dispose()


def _print_state(state: CoordinatorState) -> None:
    """Format and print a coordinator snapshot."""
    click.echo(f"\n{state.category.value} ({state.time_range.value})")
    if state.latest_value is not None:
        click.echo(f"  Latest:          {state.latest_value:,.2f}")
    else:
        click.echo("  Latest:          n/a")
    click.echo(f"  Points:          {len(state.display_series)}")

    if state.enabled_overlays:
        click.echo("\nOverlays:")
    for kind in OverlayKind:
        if kind not in state.enabled_overlays:
            continue
        if kind not in state.overlay_set:
            click.echo(f"  {kind.value:<26} not enough history")
        elif kind.is_band:
            band = state.overlay_set.band or []
            if band:
                last = band[-1]
                click.echo(
                    f"  {kind.value:<26} {last.lower:,.2f} to {last.upper:,.2f}"
                )
            else:
                click.echo(f"  {kind.value:<26} (no points in range)")
        else:
            points = state.overlay_set.get(kind) or []
            if points:
                click.echo(f"  {kind.value:<26} {points[-1].value:,.2f}")
            else:
                click.echo(f"  {kind.value:<26} (no points in range)")

    if state.last_error:
        click.echo(f"\nError: {state.last_error}")
