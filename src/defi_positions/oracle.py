"""USD price oracle shared by every position.

Prices are cached per price key as 18-decimal integers. A key whose lookup
failed may be cached as zero; ``value_of`` retries such keys on the next call
and values anything still unpriced at zero instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from .adapters.price_adapters import (
    BasePriceSource,
    CoinGeckoPriceSource,
    CoinGeckoTokenPriceSource,
    ExchangeRatePriceSource,
    FetchFailure,
    FetchResult,
    MaiarPriceSource,
    NoPriceError,
    PricesFetched,
    UnsupportedNetworkError,
)
from .adapters.price_adapters.base import canonical_address
from .domain import AddressToken, CatalogToken, RegistryToken, SymbolAsset, Token
from .networks import EGLD, OFF, SOL, Network, NETWORKS_BY_ID
from .settings import TrackerSettings
from .units import ONE_D18, mul_d18

if TYPE_CHECKING:
    from .adapters.position_adapters import BasePosition

logger = logging.getLogger(__name__)

USD_PRICE_KEY = "USD"


class PriceOracle:
    """Resolves token amounts to USD values through four upstream routes.

    Routing is by network: Elrond goes to the token registry (Maiar GraphQL),
    Solana to the CoinGecko catalog, the off-chain network to the exchange
    rate API, and every other network to CoinGecko token prices by address.
    """

    def __init__(
        self,
        config: TrackerSettings,
        *,
        token_price_source: BasePriceSource | None = None,
        registry_price_source: BasePriceSource | None = None,
        catalog_price_source: BasePriceSource | None = None,
        symbol_price_source: BasePriceSource | None = None,
    ):
        self.config = config
        self.token_price_source = token_price_source or CoinGeckoTokenPriceSource(config)
        self.registry_price_source = registry_price_source or MaiarPriceSource(config)
        self.catalog_price_source = catalog_price_source or CoinGeckoPriceSource(config)
        self.symbol_price_source = symbol_price_source or ExchangeRatePriceSource(config)
        self.prices: dict[str, int] = {}
        self.warm = False
        self.reset()

    def reset(self) -> None:
        """Drop every cached price except the USD seed and forget the warm-up."""
        self.prices = {USD_PRICE_KEY: ONE_D18}
        self.warm = False

    def get_id(self, network_id: int, token: Token) -> str:
        """Price key of a token: address, registry id, catalog id or symbol."""
        if isinstance(token, AddressToken):
            return canonical_address(token.address)
        if isinstance(token, RegistryToken):
            return token.token_id
        if isinstance(token, CatalogToken):
            return token.coingecko_id
        if isinstance(token, SymbolAsset):
            return token.symbol
        raise TypeError(f"Unsupported token identity {token!r} on network {network_id}")

    def override_price(self, network_id: int, token: Token, price: int) -> None:
        """Force the cached price (18 decimals) of a token, bypassing any fetch."""
        self.prices[self.get_id(network_id, token)] = price

    async def value_of(self, network_id: int, token: Token, amount: int) -> int:
        """USD value (18 decimals) of an 18-decimal token amount.

        Unknown prices are fetched once per call; a token that still has no
        price is valued at zero so totals can always be computed.
        """
        price_key = self.get_id(network_id, token)

        if not self.prices.get(price_key):
            if network_id == EGLD.id:
                await self.fetch_registry_prices([price_key])
            elif network_id == SOL.id:
                await self.fetch_catalog_prices([price_key])
            elif network_id == OFF.id:
                await self.fetch_symbol_price(price_key)
            else:
                await self.fetch_prices(network_id, [price_key])

        price = self.prices.get(price_key)
        if price is None:
            logger.warning(
                "No price for %s (%s) for amount %s on network %s",
                token.name or price_key,
                price_key,
                amount,
                network_id,
            )
            return 0

        return mul_d18(amount, price)

    async def warmup(self, positions: Sequence[BasePosition]) -> None:
        """Batch-fetch prices for every asset of the given positions.

        Runs at most once per oracle; the flag is set before fetching so a
        concurrent second call returns immediately.
        """
        if self.warm:
            return
        self.warm = True

        by_network: dict[int, list[BasePosition]] = {}
        for position in positions:
            by_network.setdefault(position.get_network().id, []).append(position)
        logger.info(
            "Warming up prices for %d positions on %d networks",
            len(positions),
            len(by_network),
        )

        fetches = [
            self.fetch_prices(network_id, self._price_keys(network_id, network_positions))
            for network_id, network_positions in by_network.items()
            if network_id > 0
        ]
        if EGLD.id in by_network:
            fetches.append(
                self.fetch_registry_prices(
                    self._price_keys(EGLD.id, by_network[EGLD.id])
                )
            )

        await asyncio.gather(*fetches)

    def _price_keys(
        self, network_id: int, positions: Iterable[BasePosition]
    ) -> list[str]:
        keys = (
            self.get_id(network_id, asset)
            for position in positions
            for asset in [*position.get_assets(), *position.get_reward_assets()]
        )
        return list(dict.fromkeys(keys))

    async def fetch_prices(self, network_id: int, addresses: list[str]) -> FetchResult:
        """Address-keyed route: CoinGecko token prices for one network."""
        network = NETWORKS_BY_ID.get(network_id) or Network(
            network_id, str(network_id), str(network_id)
        )
        return await self._fetch(self.token_price_source, addresses, network)

    async def fetch_registry_prices(self, token_ids: list[str]) -> FetchResult:
        """Registry-keyed route: Elrond ESDT token ids."""
        return await self._fetch(self.registry_price_source, token_ids, EGLD)

    async def fetch_catalog_prices(self, coingecko_ids: list[str]) -> FetchResult:
        """Catalog-keyed route: CoinGecko ids."""
        return await self._fetch(self.catalog_price_source, coingecko_ids, SOL)

    async def fetch_symbol_price(self, symbol: str) -> FetchResult:
        """Symbol-keyed route: a single off-chain asset."""
        return await self._fetch(self.symbol_price_source, [symbol], OFF)

    async def _fetch(
        self, source: BasePriceSource, ids: list[str], network: Network
    ) -> FetchResult:
        if not ids:
            return PricesFetched()
        logger.info("Fetching %s prices on %s: %s", source.source_name, network.name, ids)

        try:
            results = await source.fetch_prices(ids, network)
            merged = self._update_results(ids, results)
        except UnsupportedNetworkError as e:
            logger.error("%s", e)
            return FetchFailure(reason=str(e))
        except Exception as e:
            logger.warning(
                "%s price fetch failed on %s: %s", source.source_name, network.name, e
            )
            return FetchFailure(reason=f"{type(e).__name__}: {e}")

        return PricesFetched(prices=merged)

    def _update_results(self, inputs: list[str], results: dict[str, int]) -> dict[str, int]:
        """Merge fetched prices into the cache, overwriting stale entries.

        Raises:
            NoPriceError: If no usable price came back
        """
        valid = {key: price for key, price in results.items() if price >= 0}
        for key in results.keys() - valid.keys():
            logger.warning("Discarding negative price for %s: %s", key, results[key])
        if not valid:
            raise NoPriceError(f"no price for {inputs}")
        self.prices.update(valid)
        return valid
