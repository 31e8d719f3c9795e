"""CLI entrypoint for clob-report."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from .clients.ledger import LedgerError
from .clients.snapshots import SnapshotError, load_book_snapshot, load_event_snapshot
from .logger import setup_logging
from .processors.revenue import AggregationError
from .report import (
    event_records,
    format_book,
    format_market_details,
    format_market_events,
    format_revenue_report,
    format_trader_state,
)
from .settings import Network, ReportSettings
from .state import AppState
from .units import UnitConversionError

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Uncollected fee revenue and market reporting for a CLOB exchange.",
)

REPORT_ERRORS = (AggregationError, LedgerError, SnapshotError, UnitConversionError)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("clob_report")


def _state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):
        raise typer.BadParameter("CLI state was not initialised")
    return state


def _fail(state: AppState, exc: Exception) -> NoReturn:
    state.logger.error("%s", exc)
    raise typer.Exit(code=1) from exc


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [clob_report] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option("--network", "-n", help="Cluster to use (mainnet-beta or devnet)."),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="RPC endpoint; overrides the network default."),
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
            help="Print effective config (with RPC credentials redacted) and exit.",
        ),
    ] = False,
):
    """Load configuration shared by every command.

    Precedence is CLI flags, then CLOB_REPORT_* environment variables, then
    the TOML config file.
    """
    if config_path:
        os.environ["CLOB_REPORT_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Network | str] = {}
    if network is not None:
        init_kwargs["network"] = network
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    try:
        settings = ReportSettings(**init_kwargs)
    except ValidationError as e:
        setup_logging(log_level)
        _build_logger().error("Invalid configuration: %s", e)
        raise typer.Exit(code=1) from e

    setup_logging(settings.log_level)
    state = AppState(settings=settings, logger=_build_logger())

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = state


@app.command()
def revenue(
    ctx: typer.Context,
    markets: Annotated[
        list[str] | None,
        typer.Argument(help="Market addresses; defaults to the configured markets."),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Print the report as JSON.")
    ] = False,
):
    """Aggregate uncollected protocol fees across markets."""
    state = _state(ctx)

    from .pipeline.run import run_revenue_report

    try:
        report = asyncio.run(run_revenue_report(state, markets))
    except REPORT_ERRORS as e:
        _fail(state, e)

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        format_revenue_report(report)


@app.command()
def market(
    ctx: typer.Context,
    market_id: Annotated[str, typer.Argument(help="Market address.")],
):
    """Show a market's summary, vault balances and unit parameters."""
    state = _state(ctx)

    from .pipeline.run import run_market_report

    try:
        details = asyncio.run(run_market_report(state, market_id))
    except REPORT_ERRORS as e:
        _fail(state, e)

    format_market_details(
        details.market_id,
        details.state,
        details.base_vault_amount,
        details.quote_vault_amount,
    )


@app.command()
def book(
    ctx: typer.Context,
    market_id: Annotated[str, typer.Argument(help="Market address.")],
    snapshot: Annotated[
        Path,
        typer.Option("--snapshot", "-s", help="JSON book snapshot (ladder and traders)."),
    ],
):
    """Render an order book snapshot and trader balances of a market."""
    state = _state(ctx)

    from .pipeline.run import load_market_metadata

    try:
        ladder, traders = load_book_snapshot(snapshot)
        metadata = asyncio.run(load_market_metadata(state, market_id))
        ladder_lines = format_book(metadata, ladder)
        trader_lines = [
            line
            for pubkey, trader in traders.items()
            for line in format_trader_state(metadata, pubkey, trader)
        ]
    except REPORT_ERRORS as e:
        _fail(state, e)

    console = Console()
    for line in ladder_lines:
        console.print(line)
    for line in trader_lines:
        console.print(line, markup=False, highlight=False)


@app.command()
def events(
    ctx: typer.Context,
    market_id: Annotated[str, typer.Argument(help="Market whose events are logged.")],
    snapshot: Annotated[
        Path,
        typer.Option("--snapshot", "-s", help="JSON event snapshot."),
    ],
    json_output: Annotated[
        bool, typer.Option("--json", help="Print one JSON object per event.")
    ] = False,
):
    """Print the fill, place and reduce events of one market."""
    state = _state(ctx)

    from .pipeline.run import load_market_metadata

    try:
        market_events = load_event_snapshot(snapshot)
        metadata = asyncio.run(load_market_metadata(state, market_id))
        if json_output:
            lines = [
                json.dumps(record)
                for record in event_records(metadata, market_id, market_events)
            ]
        else:
            lines = format_market_events(metadata, market_id, market_events)
    except REPORT_ERRORS as e:
        _fail(state, e)

    for line in lines:
        typer.echo(line)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
