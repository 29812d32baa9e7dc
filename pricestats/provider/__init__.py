"""Remote series providers.

Re-exports the protocol and implementations:
    from pricestats.provider import SeriesProvider, CoinGeckoProvider
"""

from pricestats.provider.coingecko import CoinGeckoProvider
from pricestats.provider.fake import FakeSeriesProvider
from pricestats.provider.series_provider import SeriesProvider

__all__ = [
    "CoinGeckoProvider",
    "FakeSeriesProvider",
    "SeriesProvider",
]
