from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Union

import requests
from web3 import Web3

from ...logger import TRACE
from ...networks import Network
from ...settings import TrackerSettings

logger = logging.getLogger(__name__)


class NoPriceError(Exception):
    """A price source answered without any usable price."""


class UnsupportedNetworkError(Exception):
    """A network has no price platform configured for address lookups."""


@dataclass
class PricesFetched:
    """Prices merged into the oracle cache by a route."""

    prices: dict[str, int] = field(default_factory=dict)  # price_key -> price (18 decimals)


@dataclass
class FetchFailure:
    """A route could not produce prices; the cache is left untouched."""

    reason: str


FetchResult = Union[PricesFetched, FetchFailure]


def canonical_address(address: str) -> str:
    try:
        return Web3.to_checksum_address(address)
    except ValueError:
        return address.lower()


class BasePriceSource(ABC):
    """Abstract base class for upstream USD price sources."""

    def __init__(self, config: TrackerSettings):
        self.config = config
        self.timeout = config.http_timeout

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this source."""
        ...

    @abstractmethod
    async def fetch_prices(
        self, ids: list[str], network: Network | None = None
    ) -> dict[str, int]:
        """Fetch USD prices (18 decimals) keyed by price key.

        Raises on transport or payload errors; callers decide how to degrade.
        """
        ...

    def _headers(self) -> dict[str, str]:
        return {}

    async def _http_get(
        self, url: str, *, params: dict[str, Any] | None = None
    ) -> requests.Response:
        return await asyncio.to_thread(
            lambda: requests.get(
                url, params=params, headers=self._headers(), timeout=self.timeout
            )
        )

    async def _http_post(self, url: str, *, payload: dict[str, Any]) -> requests.Response:
        return await asyncio.to_thread(
            lambda: requests.post(
                url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        )

    async def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        response = await self._http_get(url, params=params)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise ValueError(f"Invalid JSON from {self.source_name}") from e
        logger.log(TRACE, "%s response from %s: %s", self.source_name, url, data)
        return data
