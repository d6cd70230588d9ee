"""CLI entrypoint for defi-positions."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

from pydantic import ValidationError
import typer

from .adapters import POSITION_REGISTRY
from .domain import AddressToken, CatalogToken, RegistryToken, SymbolAsset, Token
from .logger import setup_logging
from .networks import EGLD, OFF, SOL, Network, get_network
from .oracle import PriceOracle
from .report import format_portfolio
from .settings import CONFIG_ENV_VAR, TrackerSettings
from .state import AppState
from .store import Dashboard, StoreError
from .units import from_d18, to_d18

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Track DeFi positions across networks and value them in USD.",
)


def _build_logger() -> logging.Logger:
    return logging.getLogger("defi_positions")


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj


def parse_token(network: Network, identifier: str) -> Token:
    """Build the token identity a network expects from a plain identifier."""
    if network.id == EGLD.id:
        return RegistryToken(token_id=identifier, name=identifier)
    if network.id == SOL.id:
        return CatalogToken(coingecko_id=identifier, name=identifier)
    if network.id == OFF.id:
        return SymbolAsset(symbol=identifier.upper(), name=identifier.upper())
    return AddressToken(address=identifier)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [defi_positions] table).",
        ),
    ] = None,
    positions_file: Annotated[
        Path | None,
        typer.Option("--positions-file", "-p", help="JSON file holding tracked positions."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Load settings and logging, then run a command (``report`` by default)."""
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, Path | str] = {}
    if positions_file is not None:
        init_kwargs["positions_file"] = positions_file
    if log_level is not None:
        init_kwargs["log_level"] = log_level

    try:
        settings = TrackerSettings(**init_kwargs)
    except ValidationError as e:
        raise typer.BadParameter(str(e))
    setup_logging(settings.log_level)
    ctx.obj = AppState(settings=settings, logger=_build_logger())

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        ctx.invoke(report, ctx)


async def _load_dashboard(state: AppState) -> Dashboard:
    dashboard = Dashboard(state.settings)
    await dashboard.load()
    return dashboard


@app.command()
def report(ctx: typer.Context):
    """Load every tracked position and print values and allocation breakdowns."""
    state = _state(ctx)
    try:
        dashboard = asyncio.run(_load_dashboard(state))
    except StoreError as e:
        state.logger.error("%s", e)
        raise typer.Exit(code=1)

    if not dashboard.positions:
        typer.echo(f"No positions tracked in {state.settings.positions_file}")
        return
    format_portfolio(list(dashboard.positions.values()))


@app.command()
def add(
    ctx: typer.Context,
    position_type: Annotated[str, typer.Argument(help="Registered position type.")],
    address: Annotated[str, typer.Argument(help="Owner address of the position.")] = "",
    input: Annotated[str, typer.Option("--input", "-i", help="Type-specific input.")] = "",
    name: Annotated[str, typer.Option("--name", help="Display name.")] = "",
):
    """Track a new position."""
    state = _state(ctx)
    dashboard = Dashboard(state.settings)
    try:
        position = asyncio.run(dashboard.add_position(position_type, address, input, name))
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="POSITION_TYPE / --input")
    except StoreError as e:
        state.logger.error("%s", e)
        raise typer.Exit(code=1)
    typer.echo(f"Added {position.get_args().type} as {position.get_args().id}")


@app.command()
def remove(
    ctx: typer.Context,
    position_id: Annotated[str, typer.Argument(help="Id of the position to stop tracking.")],
):
    """Stop tracking a position."""
    state = _state(ctx)
    dashboard = Dashboard(state.settings)
    try:
        asyncio.run(dashboard.delete(position_id))
    except KeyError:
        raise typer.BadParameter(f"No position with id {position_id}", param_hint="POSITION_ID")
    except StoreError as e:
        state.logger.error("%s", e)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {position_id}")


@app.command()
def types():
    """List the position types that can be tracked."""
    for position_type in sorted(POSITION_REGISTRY):
        typer.echo(position_type)


@app.command()
def price(
    ctx: typer.Context,
    network: Annotated[str, typer.Argument(help="Network short name (eth, arb, egld, sol, off, ...).")],
    token: Annotated[str, typer.Argument(help="Address, token id, CoinGecko id or symbol.")],
    amount: Annotated[str, typer.Option("--amount", "-a", help="Token amount in whole units.")] = "1",
):
    """Value an amount of a token in USD."""
    try:
        target = get_network(network)
        value_amount = to_d18(amount)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    oracle = PriceOracle(_state(ctx).settings)
    value = asyncio.run(oracle.value_of(target.id, parse_token(target, token), value_amount))
    typer.echo(f"{amount} {token} on {target.name} = ${from_d18(value):,.2f}")


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
