"""Rich console formatting for revenue and market reports."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from ..domain import MarketState
from ..processors.revenue import RevenueReport
from ..units import lots_to_amount, to_decimal_string


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    if len(address) <= 16:
        return address
    return f"{address[:8]}...{address[-4:]}"


def _format_amount(amount: Decimal, places: int = 9) -> str:
    """Fixed-point rendering without scientific notation."""
    return f"{amount:,.{places}f}"


def format_revenue_report(report: RevenueReport, console: Console | None = None) -> None:
    """Print per-market fees, per-currency totals and the converted total.

    Args:
        report: The aggregated revenue report
        console: Console to print to (defaults to stdout)
    """
    console = console or Console()
    reference = report.reference_currency

    market_table = Table(expand=True, show_lines=False)
    market_table.add_column("Market", style="cyan", no_wrap=True)
    market_table.add_column("Quote", style="dim")
    market_table.add_column("Uncollected (lots)", justify="right", style="dim")
    market_table.add_column("Uncollected", justify="right", style="green")
    for market in report.markets:
        market_table.add_row(
            _truncate_address(market.market_id),
            market.quote_symbol,
            f"{market.uncollected_fee_lots:,}",
            _format_amount(market.amount),
        )

    totals_table = Table(expand=True, show_lines=False)
    totals_table.add_column("Currency", style="cyan")
    totals_table.add_column("Total", justify="right")
    totals_table.add_column(f"Rate ({reference})", justify="right", style="yellow")
    totals_table.add_column(f"Value ({reference})", justify="right", style="green")
    for symbol, total in report.currency_totals.items():
        rate = report.rates.get(symbol)
        if rate is None:
            rate_display = "[dim]<N/A>[/]"
            value_display = _format_amount(Decimal(0), 6)
        else:
            rate_display = f"{rate}"
            value_display = _format_amount(total * rate, 6)
        totals_table.add_row(symbol, _format_amount(total), rate_display, value_display)

    totals_table.add_row(
        f"[bold]TOTAL ({reference})[/]",
        "",
        "",
        f"[bold]{_format_amount(report.converted_total, 6)}[/]",
        style="bold",
    )

    outer_panel = Panel(
        Group(
            Panel(market_table, title="[bold]Markets[/]", border_style="cyan"),
            "",
            Panel(totals_table, title="[bold]Totals[/]", border_style="green"),
        ),
        title="[bold white]Uncollected Fee Revenue[/]",
        border_style="white",
        padding=(1, 2),
    )

    console.print()
    console.print(outer_panel)
    console.print()


def format_market_details(
    market_id: str,
    state: MarketState,
    base_vault_amount: int,
    quote_vault_amount: int,
    console: Console | None = None,
) -> None:
    """Print the market summary and its unit parameters.

    Args:
        market_id: Market address
        state: Decoded market account
        base_vault_amount: Base vault balance in atoms
        quote_vault_amount: Quote vault balance in atoms
        console: Console to print to (defaults to stdout)
    """
    console = console or Console()
    header = state.header
    base_decimals = header.base_params.decimals
    quote_decimals = header.quote_params.decimals

    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("Key", style="dim")
    summary.add_column("Value", style="cyan")
    summary.add_row("Market", market_id)
    summary.add_row("Base Token", header.base_params.mint_key)
    summary.add_row("Quote Token", header.quote_params.mint_key)
    summary.add_row("Authority", header.authority)

    details = Table(show_header=False, box=None, padding=(0, 1))
    details.add_column("Key", style="dim")
    details.add_column("Value", style="green")
    details.add_row(
        "Base Vault balance",
        f"{float(to_decimal_string(base_vault_amount, base_decimals)):.3f}",
    )
    details.add_row(
        "Quote Vault balance",
        f"{float(to_decimal_string(quote_vault_amount, quote_decimals)):.3f}",
    )
    details.add_row(
        "Base Lot Size", to_decimal_string(header.base_lot_size, base_decimals)
    )
    details.add_row(
        "Quote Lot Size", to_decimal_string(header.quote_lot_size, quote_decimals)
    )
    details.add_row(
        "Tick size",
        to_decimal_string(header.tick_size_in_quote_atoms_per_base_unit, quote_decimals),
    )
    details.add_row("Taker fees in basis points", str(state.taker_fee_bps))
    details.add_row(
        "Uncollected fees",
        to_decimal_string(
            lots_to_amount(state.uncollected_quote_lot_fees, header.quote_lot_size),
            quote_decimals,
        ),
    )

    console.print(
        Group(
            Panel(summary, title="[bold]Market Summary[/]", border_style="blue"),
            Panel(details, title="[bold]Market Details[/]", border_style="green"),
        )
    )
