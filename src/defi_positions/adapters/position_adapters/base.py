from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain import Token
from ...networks import Network

if TYPE_CHECKING:
    from ...oracle import PriceOracle


class PositionArgs(BaseModel):
    """User-supplied arguments a position is built from; this is what gets persisted."""

    id: str = ""
    type: str
    address: str = ""
    input: str = ""
    name: str = ""

    model_config = ConfigDict(extra="ignore")


@dataclass
class PositionAmount:
    """Amount of one asset held by a position and its USD value."""

    asset: Token
    amount: int  # 18 decimals
    value: int  # USD, 18 decimals


class BasePosition(ABC):
    """Abstract base class for protocol positions.

    Protocol adapters read on-chain state in ``load()`` and value it through
    the shared price oracle.
    """

    def __init__(self, args: PositionArgs, oracle: PriceOracle):
        self.args = args
        self.oracle = oracle
        self.loaded = False

    @property
    @abstractmethod
    def position_type(self) -> str:
        """Return the registry type string of this position."""
        ...

    def get_args(self) -> PositionArgs:
        return self.args

    def get_name(self) -> str:
        return ""

    @abstractmethod
    def get_network(self) -> Network:
        ...

    @abstractmethod
    def get_assets(self) -> list[Token]:
        """Primary assets held by the position."""
        ...

    @abstractmethod
    def get_reward_assets(self) -> list[Token]:
        """Assets the position accrues as rewards, empty when it earns none."""
        ...

    @abstractmethod
    def get_amounts(self) -> list[PositionAmount]:
        ...

    def get_pending_rewards(self) -> list[PositionAmount]:
        return []

    def get_tvl(self) -> int:
        return 0

    @abstractmethod
    async def load(self) -> None:
        """Refresh amounts and values."""
        ...
