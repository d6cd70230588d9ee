from __future__ import annotations

from .formatter import build_positions_table, format_portfolio

__all__ = ["build_positions_table", "format_portfolio"]
