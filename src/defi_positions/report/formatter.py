"""Rich console formatter for the portfolio report."""

from __future__ import annotations

from collections.abc import Sequence

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..adapters.position_adapters import BasePosition
from ..processors import (
    Breakdown,
    position_rows,
    value_per_asset_class,
    value_per_chain,
    value_per_position,
)


def _format_usd(value: float) -> str:
    return f"${value:,.2f}"


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    if len(address) <= 16:
        return address
    return f"{address[:10]}...{address[-4:]}"


def _breakdown_table(breakdown: Breakdown, label: str) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 1), expand=True)
    table.add_column(label, style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_column("Share", justify="right", style="dim")
    total = sum(breakdown.values)
    for name, value in zip(breakdown.labels, breakdown.values):
        share = f"{value / total:.1%}" if total else "-"
        table.add_row(Text(name), _format_usd(value), share)
    return table


def build_positions_table(positions: Sequence[BasePosition]) -> Table:
    table = Table(expand=True, show_lines=False)
    table.add_column("Position", style="cyan", no_wrap=True)
    table.add_column("Chain", style="dim")
    table.add_column("Address", style="dim")
    table.add_column("Market Value", justify="right", style="green")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("TVL", justify="right")
    table.add_column("ID", style="dim")

    for row in position_rows(positions):
        name = Text(row.name) if row.loaded else Text(f"{row.name} (not loaded)", style="red")
        table.add_row(
            name,
            Text(row.chain),
            Text(_truncate_address(row.address)),
            _format_usd(row.market_value),
            _format_usd(row.pending),
            _format_usd(row.tvl),
            Text(row.id),
        )
    return table


def format_portfolio(positions: Sequence[BasePosition], console: Console | None = None) -> None:
    """Print the positions table and allocation breakdowns.

    Args:
        positions: Loaded positions
        console: Target console, stdout when omitted
    """
    console = console or Console()

    per_chain = value_per_chain(positions)
    breakdowns = Columns(
        [
            Panel(
                _breakdown_table(value_per_position(positions), "Position"),
                title="[bold]Per Position[/]",
                border_style="blue",
            ),
            Panel(
                _breakdown_table(value_per_asset_class(positions), "Asset Class"),
                title="[bold]Per Asset Class[/]",
                border_style="magenta",
            ),
            Panel(
                _breakdown_table(per_chain, "Chain"),
                title="[bold]Per Chain[/]",
                border_style="green",
            ),
        ],
        equal=True,
        expand=True,
    )

    outer_panel = Panel(
        Group(build_positions_table(positions), "", breakdowns),
        title=f"[bold white]Portfolio {_format_usd(per_chain.grandtotal)}[/]",
        border_style="white",
        padding=(1, 2),
    )

    console.print()
    console.print(outer_panel)
    console.print()
