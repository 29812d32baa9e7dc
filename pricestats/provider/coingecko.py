"""CoinGeckoProvider -- SeriesProvider over the CoinGecko REST API via httpx.

Endpoints used:
- GET /api/v3/coins/{id}/market_chart?vs_currency=..&days=..
  -> {"prices": [[ms, v], ...], "market_caps": [...], "total_volumes": [...]}
- GET /api/v3/simple/price?ids=..&vs_currencies=..&include_...=true
  -> {"<id>": {"usd": v, "usd_market_cap": v, "usd_24h_vol": v,
               "last_updated_at": unix_seconds}}
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, Self

import httpx
import structlog

from pricestats.config import ProviderConfig
from pricestats.errors import DecodeError, TransportError
from pricestats.series.types import Category, Point, Series
from pricestats.utils.time import from_unix_millis, utc_now

logger = structlog.get_logger()

API_KEY_HEADER = "x-cg-demo-api-key"

# market_chart array holding each category
_CHART_KEYS: dict[Category, str] = {
    Category.PRICE: "prices",
    Category.MARKET_CAP: "market_caps",
    Category.TOTAL_VOLUME: "total_volumes",
}


def _spot_key(category: Category, vs_currency: str) -> str:
    return {
        Category.PRICE: vs_currency,
        Category.MARKET_CAP: f"{vs_currency}_market_cap",
        Category.TOTAL_VOLUME: f"{vs_currency}_24h_vol",
    }[category]


def parse_market_chart(payload: Any, category: Category) -> Series:
    """Decode a market_chart payload into an ascending series.

    Entries with a null value are skipped. Malformed entries and NaN or
    infinite values raise DecodeError.
    """
    key = _CHART_KEYS[category]
    if not isinstance(payload, dict) or not isinstance(payload.get(key), list):
        raise DecodeError(f"market_chart payload missing '{key}' array")

    points: Series = []
    for entry in payload[key]:
        if not isinstance(entry, list | tuple) or len(entry) != 2:
            raise DecodeError(f"Malformed {key} entry: {entry!r}")
        ts, value = entry
        if value is None:
            continue
        try:
            point = Point(timestamp=from_unix_millis(float(ts)), value=float(value))
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise DecodeError(f"Malformed {key} entry: {entry!r}") from e
        if not math.isfinite(point.value):
            raise DecodeError(f"Non-finite {key} value: {entry!r}")
        points.append(point)
    points.sort(key=lambda p: p.timestamp)
    return points


def parse_spot(
    payload: Any,
    category: Category,
    coin_id: str,
    vs_currency: str,
) -> Point:
    """Decode a simple/price payload into a single Point."""
    if not isinstance(payload, dict) or not isinstance(payload.get(coin_id), dict):
        raise DecodeError(f"simple/price payload missing '{coin_id}'")
    data = payload[coin_id]
    key = _spot_key(category, vs_currency)
    try:
        value = float(data[key])
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"simple/price payload missing numeric '{key}'") from e
    if not math.isfinite(value):
        raise DecodeError(f"Non-finite '{key}' value: {value!r}")

    updated = data.get("last_updated_at")
    if isinstance(updated, int | float):
        timestamp = datetime.fromtimestamp(updated, tz=UTC)
    else:
        timestamp = utc_now()
    return Point(timestamp=timestamp, value=value)


class CoinGeckoProvider:
    """SeriesProvider implementation backed by CoinGecko.

    Pass an ``httpx.AsyncClient`` to share a pool or to inject a mock
    transport; otherwise one is created on ``connect()``.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._owns_client = client is None

    async def connect(self) -> None:
        if self._client is not None:
            return
        headers = {"accept": "application/json"}
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            headers=headers,
        )
        logger.info("coingecko_provider_connected", base_url=self._config.base_url)

    async def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_full_history(self, category: Category) -> Series:
        return await self._market_chart(category, "max")

    async def fetch_range(self, category: Category, span_days: int) -> Series:
        if span_days < 1:
            raise ValueError(f"span_days must be >= 1, got {span_days}")
        return await self._market_chart(category, str(span_days))

    async def fetch_latest(self, category: Category) -> Point:
        payload = await self._get_json(
            "/api/v3/simple/price",
            {
                "ids": self._config.coin_id,
                "vs_currencies": self._config.vs_currency,
                "include_market_cap": "true",
                "include_24hr_vol": "true",
                "include_last_updated_at": "true",
            },
        )
        return parse_spot(
            payload, category, self._config.coin_id, self._config.vs_currency
        )

    async def _market_chart(self, category: Category, days: str) -> Series:
        payload = await self._get_json(
            f"/api/v3/coins/{self._config.coin_id}/market_chart",
            {"vs_currency": self._config.vs_currency, "days": days},
        )
        points = parse_market_chart(payload, category)
        logger.info(
            "market_chart_fetched",
            category=category.value,
            days=days,
            point_count=len(points),
        )
        return points

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        if self._client is None:
            await self.connect()
        assert self._client is not None

        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                response.reason_phrase or "request failed",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {path}: {e}") from e

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.disconnect()
