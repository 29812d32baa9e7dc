"""Tests for CoinGeckoProvider using httpx.MockTransport."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from pricestats.config import ProviderConfig
from pricestats.errors import DecodeError, TransportError
from pricestats.provider.coingecko import (
    API_KEY_HEADER,
    CoinGeckoProvider,
    parse_market_chart,
    parse_spot,
)
from pricestats.provider.series_provider import SeriesProvider
from pricestats.series.types import Category

# 2024-01-01T00:00:00Z and the following day, in milliseconds
_T0 = 1_704_067_200_000
_T1 = _T0 + 86_400_000

_CHART = {
    "prices": [[_T1, 42_500.5], [_T0, 42_000.0]],
    "market_caps": [[_T0, 8.2e11], [_T1, 8.3e11]],
    "total_volumes": [[_T0, 1.5e10], [_T1, None]],
}

_SPOT = {
    "bitcoin": {
        "usd": 43_000.0,
        "usd_market_cap": 8.4e11,
        "usd_24h_vol": 2.0e10,
        "last_updated_at": 1_704_153_600,
    }
}


def _provider(
    handler: Callable[[httpx.Request], httpx.Response],
    config: ProviderConfig | None = None,
) -> CoinGeckoProvider:
    cfg = config or ProviderConfig()
    client = httpx.AsyncClient(
        base_url=cfg.base_url,
        transport=httpx.MockTransport(handler),
    )
    return CoinGeckoProvider(cfg, client=client)


class TestParseMarketChart:
    def test_sorted_ascending(self) -> None:
        series = parse_market_chart(_CHART, Category.PRICE)
        assert [p.value for p in series] == [42_000.0, 42_500.5]
        assert series[0].timestamp == datetime(2024, 1, 1, tzinfo=UTC)

    def test_selects_category_array(self) -> None:
        series = parse_market_chart(_CHART, Category.MARKET_CAP)
        assert [p.value for p in series] == [8.2e11, 8.3e11]

    def test_null_values_skipped(self) -> None:
        series = parse_market_chart(_CHART, Category.TOTAL_VOLUME)
        assert len(series) == 1

    def test_missing_array_raises(self) -> None:
        with pytest.raises(DecodeError):
            parse_market_chart({"prices": []}, Category.MARKET_CAP)

    @pytest.mark.parametrize(
        "entry",
        [[_T0], "oops", [_T0, "not-a-number"], [None, 1.0]],
    )
    def test_malformed_entry_raises(self, entry: object) -> None:
        with pytest.raises(DecodeError):
            parse_market_chart({"prices": [entry]}, Category.PRICE)

    def test_non_dict_payload_raises(self) -> None:
        with pytest.raises(DecodeError):
            parse_market_chart([], Category.PRICE)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_value_raises(self, value: float) -> None:
        with pytest.raises(DecodeError):
            parse_market_chart({"prices": [[_T0, 1.0], [_T1, value]]}, Category.PRICE)


class TestParseSpot:
    @pytest.mark.parametrize(
        ("category", "expected"),
        [
            (Category.PRICE, 43_000.0),
            (Category.MARKET_CAP, 8.4e11),
            (Category.TOTAL_VOLUME, 2.0e10),
        ],
    )
    def test_value_per_category(self, category: Category, expected: float) -> None:
        point = parse_spot(_SPOT, category, "bitcoin", "usd")
        assert point.value == expected
        assert point.timestamp == datetime(2024, 1, 2, tzinfo=UTC)

    def test_missing_coin_raises(self) -> None:
        with pytest.raises(DecodeError):
            parse_spot({}, Category.PRICE, "bitcoin", "usd")

    def test_missing_currency_raises(self) -> None:
        with pytest.raises(DecodeError):
            parse_spot(_SPOT, Category.PRICE, "bitcoin", "eur")

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_value_raises(self, value: float) -> None:
        with pytest.raises(DecodeError):
            parse_spot({"bitcoin": {"usd": value}}, Category.PRICE, "bitcoin", "usd")


class TestRequests:
    """Request paths, params and headers."""

    async def test_full_history_requests_max_days(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_CHART)

        async with _provider(handler) as provider:
            series = await provider.fetch_full_history(Category.PRICE)

        assert len(series) == 2
        assert seen[0].url.path == "/api/v3/coins/bitcoin/market_chart"
        assert seen[0].url.params["vs_currency"] == "usd"
        assert seen[0].url.params["days"] == "max"

    async def test_range_requests_span_days(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_CHART)

        async with _provider(handler) as provider:
            await provider.fetch_range(Category.PRICE, 7)

        assert seen[0].url.params["days"] == "7"

    async def test_range_rejects_non_positive_span(self) -> None:
        provider = _provider(lambda r: httpx.Response(200, json=_CHART))
        with pytest.raises(ValueError):
            await provider.fetch_range(Category.PRICE, 0)

    async def test_latest_uses_simple_price(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_SPOT)

        async with _provider(handler) as provider:
            point = await provider.fetch_latest(Category.PRICE)

        assert point.value == 43_000.0
        assert seen[0].url.path == "/api/v3/simple/price"
        assert seen[0].url.params["ids"] == "bitcoin"
        assert seen[0].url.params["vs_currencies"] == "usd"
        assert seen[0].url.params["include_last_updated_at"] == "true"

    async def test_api_key_header_on_owned_client(self) -> None:
        provider = CoinGeckoProvider(ProviderConfig(api_key="demo-key"))
        await provider.connect()
        try:
            assert provider._client is not None
            assert provider._client.headers[API_KEY_HEADER] == "demo-key"
        finally:
            await provider.disconnect()
        assert provider._client is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(CoinGeckoProvider(ProviderConfig()), SeriesProvider)


class TestErrors:
    async def test_http_status_maps_to_transport_error(self) -> None:
        provider = _provider(lambda r: httpx.Response(429))

        with pytest.raises(TransportError) as exc_info:
            await provider.fetch_full_history(Category.PRICE)

        assert exc_info.value.status_code == 429
        assert "429" in str(exc_info.value)

    async def test_connect_error_maps_to_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler)

        with pytest.raises(TransportError) as exc_info:
            await provider.fetch_latest(Category.PRICE)

        assert exc_info.value.status_code is None

    async def test_invalid_json_maps_to_decode_error(self) -> None:
        provider = _provider(lambda r: httpx.Response(200, content=b"<html>"))

        with pytest.raises(DecodeError):
            await provider.fetch_full_history(Category.PRICE)

    async def test_unexpected_shape_maps_to_decode_error(self) -> None:
        provider = _provider(lambda r: httpx.Response(200, json={"error": "nope"}))

        with pytest.raises(DecodeError):
            await provider.fetch_full_history(Category.PRICE)

    async def test_nan_literal_in_chart_maps_to_decode_error(self) -> None:
        body = f'{{"prices": [[{_T0}, 1.0], [{_T1}, NaN]]}}'.encode()
        provider = _provider(
            lambda r: httpx.Response(
                200, content=body, headers={"content-type": "application/json"}
            )
        )

        with pytest.raises(DecodeError):
            await provider.fetch_full_history(Category.PRICE)

    async def test_infinity_literal_in_spot_maps_to_decode_error(self) -> None:
        body = b'{"bitcoin": {"usd": Infinity, "last_updated_at": 1704153600}}'
        provider = _provider(
            lambda r: httpx.Response(
                200, content=body, headers={"content-type": "application/json"}
            )
        )

        with pytest.raises(DecodeError):
            await provider.fetch_latest(Category.PRICE)
