from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Callable

from .base import BasePosition, PositionAmount, PositionArgs
from .offchain import OffChainHolding

if TYPE_CHECKING:
    from ...oracle import PriceOracle

PositionBuilder = Callable[[PositionArgs, "PriceOracle"], BasePosition]

POSITION_REGISTRY: dict[str, PositionBuilder] = {
    OffChainHolding.TYPE: OffChainHolding,
}


def register_position(position_type: str, builder: PositionBuilder) -> None:
    """Register a builder for a position type string such as ``eth:SushiSwap:Farm:USDC/ETH``."""
    POSITION_REGISTRY[position_type] = builder


def get_position_builder(position_type: str) -> PositionBuilder:
    """Get the builder registered for a position type.

    Raises:
        ValueError: If position_type is not recognized
    """
    if position_type not in POSITION_REGISTRY:
        raise ValueError(
            f"Unknown position type '{position_type}'. "
            f"Available: {', '.join(sorted(POSITION_REGISTRY))}"
        )
    return POSITION_REGISTRY[position_type]


def create_position(args: PositionArgs, oracle: PriceOracle) -> BasePosition:
    """Build a position from its arguments, assigning an id when it has none."""
    builder = get_position_builder(args.type)
    if not args.id:
        args = args.model_copy(update={"id": uuid.uuid4().hex})
    return builder(args, oracle)


__all__ = [
    "BasePosition",
    "OffChainHolding",
    "POSITION_REGISTRY",
    "PositionAmount",
    "PositionArgs",
    "PositionBuilder",
    "create_position",
    "get_position_builder",
    "register_position",
]
