from __future__ import annotations

from .portfolio import (
    Breakdown,
    ChainBreakdown,
    PositionRow,
    asset_class,
    load_positions,
    market_value,
    pending_rewards_value,
    position_rows,
    total_market_value,
    value_per_asset_class,
    value_per_chain,
    value_per_position,
)

__all__ = [
    "Breakdown",
    "ChainBreakdown",
    "PositionRow",
    "asset_class",
    "load_positions",
    "market_value",
    "pending_rewards_value",
    "position_rows",
    "total_market_value",
    "value_per_asset_class",
    "value_per_chain",
    "value_per_position",
]
