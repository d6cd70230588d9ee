from __future__ import annotations

from .position_adapters import POSITION_REGISTRY, create_position

__all__ = ["POSITION_REGISTRY", "create_position"]
