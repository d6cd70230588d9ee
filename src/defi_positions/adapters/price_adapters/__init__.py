from __future__ import annotations

from .base import (
    BasePriceSource,
    FetchFailure,
    FetchResult,
    NoPriceError,
    PricesFetched,
    UnsupportedNetworkError,
)
from .coingecko import CoinGeckoPriceSource, CoinGeckoTokenPriceSource
from .exchange_rate import ExchangeRatePriceSource
from .maiar import MaiarPriceSource

__all__ = [
    "BasePriceSource",
    "CoinGeckoPriceSource",
    "CoinGeckoTokenPriceSource",
    "ExchangeRatePriceSource",
    "FetchFailure",
    "FetchResult",
    "MaiarPriceSource",
    "NoPriceError",
    "PricesFetched",
    "UnsupportedNetworkError",
]
