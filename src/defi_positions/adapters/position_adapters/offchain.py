from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from ...domain import SymbolAsset, Token
from ...networks import OFF, Network
from ...units import to_d18
from .base import BasePosition, PositionAmount, PositionArgs

if TYPE_CHECKING:
    from ...oracle import PriceOracle


def parse_holding(value: str) -> tuple[str, Decimal]:
    """Parse ``"<SYMBOL>:<amount>"`` into an upper-cased symbol and an amount.

    Raises:
        ValueError: If the input is malformed or the amount is negative
    """
    symbol, sep, amount_text = value.partition(":")
    symbol = symbol.strip().upper()
    if not sep or not symbol:
        raise ValueError(f"Expected '<SYMBOL>:<amount>', got '{value}'")
    try:
        amount = Decimal(amount_text.strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount in '{value}'") from e
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid amount in '{value}'")
    return symbol, amount


class OffChainHolding(BasePosition):
    """A manually entered off-chain holding, e.g. ``EUR:1500`` or ``XAU:2``."""

    TYPE = "off:OffChain:Holding"

    def __init__(self, args: PositionArgs, oracle: PriceOracle):
        super().__init__(args, oracle)
        symbol, amount = parse_holding(args.input)
        self.asset = SymbolAsset(symbol=symbol, name=symbol)
        self.amount = to_d18(amount)
        self.value = 0

    @property
    def position_type(self) -> str:
        return self.TYPE

    def get_name(self) -> str:
        return f"{self.asset.symbol} holding"

    def get_network(self) -> Network:
        return OFF

    def get_assets(self) -> list[Token]:
        return [self.asset]

    def get_reward_assets(self) -> list[Token]:
        return []

    def get_amounts(self) -> list[PositionAmount]:
        return [PositionAmount(asset=self.asset, amount=self.amount, value=self.value)]

    async def load(self) -> None:
        self.value = await self.oracle.value_of(OFF.id, self.asset, self.amount)
