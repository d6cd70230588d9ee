from __future__ import annotations

import logging

from ...networks import Network
from ...settings import TrackerSettings
from ...units import to_d18
from .base import BasePriceSource

logger = logging.getLogger(__name__)


class ExchangeRatePriceSource(BasePriceSource):
    """USD rates for off-chain assets from the API Ninjas exchange rate endpoint.

    The endpoint answers one currency pair per request, so each symbol costs
    one call. A missing ``exchange_rate`` field counts as a rate of 1.
    """

    def __init__(self, config: TrackerSettings):
        super().__init__(config)
        self.api_url = config.exchange_rate_api_url
        self.api_key = config.exchange_rate_api_key

    @property
    def source_name(self) -> str:
        return "exchange_rate"

    def _headers(self) -> dict[str, str]:
        if self.api_key is None:
            return {}
        return {"X-Api-Key": self.api_key.get_secret_value()}

    async def fetch_rate(self, symbol: str) -> int:
        logger.debug("Calling %s for %s_USD", self.api_url, symbol)
        data = await self._get_json(self.api_url, params={"pair": f"{symbol}_USD"})
        if not isinstance(data, dict):
            raise ValueError(f"Invalid response structure: {data}")
        return to_d18(data.get("exchange_rate") or 1)

    async def fetch_prices(
        self, ids: list[str], network: Network | None = None
    ) -> dict[str, int]:
        return {symbol: await self.fetch_rate(symbol) for symbol in ids}
