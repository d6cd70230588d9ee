from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..adapters.position_adapters import BasePosition
from ..domain import AddressToken, CatalogToken, RegistryToken, SymbolAsset, Token
from ..oracle import PriceOracle
from ..units import ONE_D18

logger = logging.getLogger(__name__)

# name fragment -> asset class, checked in order
_NAME_CLASSES = (
    ("btc", "BTC"),
    ("eth", "ETH"),
    ("bnb", "BNB"),
    ("avax", "AVAX"),
    ("matic", "MATIC"),
    ("ftm", "FTM"),
)
_USD_NAMES = {"dai", "mai", "mim"}


@dataclass
class PositionRow:
    """One line of the positions table."""

    id: str
    type: str
    name: str
    chain: str
    market_value: float
    pending: float
    tvl: float
    address: str
    loaded: bool


@dataclass
class Breakdown:
    """Labelled values for an allocation chart, largest first."""

    labels: list[str] = field(default_factory=list)
    values: list[int] = field(default_factory=list)


@dataclass
class ChainBreakdown(Breakdown):
    grandtotal: int = 0


async def load_positions(oracle: PriceOracle, positions: Sequence[BasePosition]) -> None:
    """Warm up prices, then load every position concurrently.

    A position that fails to load is logged and flagged ``loaded = False``;
    the others are unaffected.
    """
    await oracle.warmup(positions)

    async def _load(position: BasePosition) -> None:
        try:
            await position.load()
            position.loaded = True
        except Exception as e:
            position.loaded = False
            logger.warning("Failed to load %s: %s", position.get_args().type, e)

    await asyncio.gather(*(_load(p) for p in positions))
    logger.info("Loaded %d/%d positions", sum(p.loaded for p in positions), len(positions))


def to_number(value: int) -> float:
    """18-decimal USD value as a float, truncated to 3 decimals."""
    return (value * 1000 // ONE_D18) / 1000


def market_value(position: BasePosition) -> int:
    return sum((a.value for a in position.get_amounts()), 0)


def pending_rewards_value(position: BasePosition) -> int:
    return sum((r.value for r in position.get_pending_rewards()), 0)


def total_market_value(positions: Sequence[BasePosition]) -> int:
    return sum((market_value(p) for p in positions), 0)


def display_name(position: BasePosition) -> str:
    args = position.get_args()
    return args.name or position.get_name() or args.type


def position_rows(positions: Sequence[BasePosition]) -> list[PositionRow]:
    """Table rows sorted by position type."""
    return [
        PositionRow(
            id=p.get_args().id,
            type=p.get_args().type,
            name=display_name(p),
            chain=p.get_network().name,
            market_value=to_number(market_value(p)),
            pending=to_number(pending_rewards_value(p)),
            tvl=to_number(p.get_tvl()),
            address=p.get_args().address,
            loaded=p.loaded,
        )
        for p in sorted(positions, key=lambda p: p.get_args().type)
    ]


def value_per_position(positions: Sequence[BasePosition]) -> Breakdown:
    rows = sorted(
        ((display_name(p), round(to_number(market_value(p)))) for p in positions),
        key=lambda row: -row[1],
    )
    return Breakdown(labels=[r[0] for r in rows], values=[r[1] for r in rows])


def value_per_asset_class(positions: Sequence[BasePosition]) -> Breakdown:
    totals: dict[str, float] = {}
    for position in positions:
        for amount in position.get_amounts():
            key = asset_class(amount.asset)
            totals[key] = totals.get(key, 0.0) + to_number(amount.value)

    ordered = sorted(totals.items(), key=lambda item: -item[1])
    return Breakdown(
        labels=[label for label, _ in ordered],
        values=[round(value) for _, value in ordered],
    )


def value_per_chain(positions: Sequence[BasePosition]) -> ChainBreakdown:
    grouped: dict[str, list[BasePosition]] = {}
    for position in positions:
        grouped.setdefault(position.get_network().name, []).append(position)

    per_chain = sorted(
        (
            (chain, round(to_number(total_market_value(chain_positions))))
            for chain, chain_positions in grouped.items()
        ),
        key=lambda item: -item[1],
    )
    return ChainBreakdown(
        labels=[chain for chain, _ in per_chain],
        values=[value for _, value in per_chain],
        grandtotal=sum(value for _, value in per_chain),
    )


def asset_class(token: Token) -> str:
    """Bucket a token into a coarse asset class for the allocation chart."""
    if isinstance(token, SymbolAsset):
        return token.symbol
    if isinstance(token, RegistryToken):
        return token.token_id
    if isinstance(token, CatalogToken) and token.symbol:
        return token.symbol

    name = token.name.lower()
    if "usd" in name or name in _USD_NAMES:
        return "USD"
    for fragment, label in _NAME_CLASSES:
        if fragment in name:
            return label
    if token.name:
        return token.name
    if isinstance(token, AddressToken):
        return token.address
    return token.coingecko_id
