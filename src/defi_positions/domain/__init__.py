"""Token identities understood by the price oracle.

Each chain family identifies tokens differently, so a token is one of:

- ``AddressToken``: EVM contract token, keyed by its address
- ``RegistryToken``: token-registry ID (Elrond ESDT), keyed by its token ID
- ``CatalogToken``: token known by a price-provider catalog ID (Solana)
- ``SymbolAsset``: off-chain asset (currency, commodity) keyed by its symbol
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class AddressToken:
    address: str
    name: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class RegistryToken:
    token_id: str
    name: str = ""


@dataclass(frozen=True)
class CatalogToken:
    coingecko_id: str
    name: str = ""
    symbol: str = ""


@dataclass(frozen=True)
class SymbolAsset:
    symbol: str
    name: str = ""


Token = Union[AddressToken, RegistryToken, CatalogToken, SymbolAsset]

__all__ = ["AddressToken", "CatalogToken", "RegistryToken", "SymbolAsset", "Token"]
