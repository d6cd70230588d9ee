from __future__ import annotations

import logging
from typing import Any

from ...networks import Network
from ...settings import TrackerSettings
from ...units import to_d18
from .base import BasePriceSource

logger = logging.getLogger(__name__)


def build_price_query(token_ids: list[str]) -> dict[str, Any]:
    """Build one GraphQL request pricing every token id.

    Each id is bound to a ``$tokenN`` variable and aliased as ``tokenN`` in
    the selection, so the response can be mapped back through ``variables``.
    """
    variables = {f"token{i}": token_id for i, token_id in enumerate(token_ids)}
    declarations = ", ".join(f"${name}: String!" for name in variables)
    selections = "\n".join(
        f"  {name}: getTokenPriceUSD(tokenID: ${name})" for name in variables
    )
    return {
        "variables": variables,
        "query": f"query ({declarations}) {{\n{selections}\n}}",
    }


class MaiarPriceSource(BasePriceSource):
    """USD prices for Elrond ESDT token ids from the Maiar exchange GraphQL API."""

    def __init__(self, config: TrackerSettings):
        super().__init__(config)
        self.graphql_url = config.maiar_graphql_url

    @property
    def source_name(self) -> str:
        return "maiar"

    def _headers(self) -> dict[str, str]:
        return {"content-type": "application/json"}

    async def fetch_prices(
        self, ids: list[str], network: Network | None = None
    ) -> dict[str, int]:
        body = build_price_query(ids)
        logger.debug("Posting price query for %d token ids to %s", len(ids), self.graphql_url)
        response = await self._http_post(self.graphql_url, payload=body)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise ValueError("Invalid JSON from Maiar GraphQL API") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            errors = payload.get("errors") if isinstance(payload, dict) else payload
            raise ValueError(f"Invalid GraphQL response: {errors}")

        variables = body["variables"]
        prices: dict[str, int] = {}
        for alias, value in data.items():
            token_id = variables.get(alias)
            if token_id is None or value is None:
                continue
            prices[token_id] = to_d18(value)
        return prices
