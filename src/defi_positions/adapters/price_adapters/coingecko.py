from __future__ import annotations

import logging
from typing import Any

from ...networks import Network
from ...settings import TrackerSettings
from ...units import to_d18
from .base import BasePriceSource, UnsupportedNetworkError, canonical_address

logger = logging.getLogger(__name__)


def _usd_prices(data: Any, source_name: str) -> dict[str, int]:
    """Parse a ``{key: {"usd": number}}`` payload; entries without a usd price are skipped."""
    if not isinstance(data, dict):
        raise ValueError(f"Invalid response structure from {source_name}: {data}")

    prices: dict[str, int] = {}
    for key, entry in data.items():
        usd = entry.get("usd") if isinstance(entry, dict) else None
        if usd is None:
            logger.debug("No usd price for %s in %s response", key, source_name)
            continue
        prices[key] = to_d18(usd)
    return prices


class _CoinGeckoSource(BasePriceSource):
    def __init__(self, config: TrackerSettings):
        super().__init__(config)
        self.api_base_url = config.coingecko_api_url.rstrip("/")
        self.api_key = config.coingecko_api_key

    def _headers(self) -> dict[str, str]:
        if self.api_key is None:
            return {}
        return {"x-cg-pro-api-key": self.api_key.get_secret_value()}


class CoinGeckoTokenPriceSource(_CoinGeckoSource):
    """USD prices for EVM contract addresses, one request per network batch."""

    def __init__(self, config: TrackerSettings):
        super().__init__(config)
        self.platform_overrides = dict(config.price_platforms)

    @property
    def source_name(self) -> str:
        return "coingecko_token_price"

    def platform_for(self, network: Network) -> str:
        platform = self.platform_overrides.get(network.id, network.price_platform)
        if not platform:
            raise UnsupportedNetworkError(
                f"No price platform configured for network {network.name} ({network.id})"
            )
        return platform

    async def fetch_prices(
        self, ids: list[str], network: Network | None = None
    ) -> dict[str, int]:
        if network is None:
            raise UnsupportedNetworkError("Token price lookups need a network")
        platform = self.platform_for(network)
        url = f"{self.api_base_url}/simple/token_price/{platform}"
        logger.debug("Calling %s for %d addresses", url, len(ids))
        data = await self._get_json(
            url,
            params={"contract_addresses": ",".join(ids), "vs_currencies": "usd"},
        )
        return {
            canonical_address(address): price
            for address, price in _usd_prices(data, self.source_name).items()
        }


class CoinGeckoPriceSource(_CoinGeckoSource):
    """USD prices by CoinGecko catalog id."""

    @property
    def source_name(self) -> str:
        return "coingecko_price"

    async def fetch_prices(
        self, ids: list[str], network: Network | None = None
    ) -> dict[str, int]:
        url = f"{self.api_base_url}/simple/price"
        logger.debug("Calling %s for %s", url, ids)
        data = await self._get_json(
            url, params={"ids": ",".join(ids), "vs_currencies": "usd"}
        )
        return _usd_prices(data, self.source_name)
