"""Order book ladder and trader balance rendering."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text

from ..domain import Ladder, MarketMetadata, TraderState
from ..units import lots_to_amount, ticks_to_price, to_decimal, to_decimal_string

BOOK_COLUMN_WIDTH = 10
BOOK_PRECISION = 4


def base_lots_to_units(lots: int, metadata: MarketMetadata) -> float:
    """Size of ``lots`` base lots in base units."""
    atoms = lots_to_amount(lots, metadata.base_lot_size)
    units = to_decimal(atoms, metadata.base_decimals) / Decimal(
        metadata.raw_base_units_per_base_unit
    )
    return float(units)


def _price(ticks: int, metadata: MarketMetadata) -> float:
    return ticks_to_price(
        ticks,
        metadata.tick_size_in_quote_atoms_per_base_unit,
        metadata.quote_decimals,
        metadata.raw_base_units_per_base_unit,
    )


def format_book(metadata: MarketMetadata, ladder: Ladder) -> list[Text]:
    """Render the ladder with asks on top (highest first) and bids below.

    Ask sizes sit in the right column in red, bid sizes in the left column
    in green, prices centred between them.
    """
    width = BOOK_COLUMN_WIDTH
    precision = BOOK_PRECISION
    lines: list[Text] = []

    for level in reversed(ladder.asks):
        price = f"{_price(level.price_in_ticks, metadata):.{precision}f}"
        size = f"{base_lots_to_units(level.size_in_base_lots, metadata):.{precision}f}"
        line = Text(f"{'':{width}} {price:^{width}} ")
        line.append(f"{size:<{width}}", style="red")
        lines.append(line)

    for level in ladder.bids:
        price = f"{_price(level.price_in_ticks, metadata):.{precision}f}"
        size = f"{base_lots_to_units(level.size_in_base_lots, metadata):.{precision}f}"
        line = Text()
        line.append(f"{size:>{width}}", style="green")
        line.append(f" {price:^{width}} {'':{width}}")
        lines.append(line)

    return lines


def format_trader_state(
    metadata: MarketMetadata, pubkey: str, state: TraderState
) -> list[str]:
    """Render a trader's locked and free balances; nothing for an empty seat."""
    if state.is_empty:
        return []

    def base(lots: int) -> str:
        return to_decimal_string(
            lots_to_amount(lots, metadata.base_lot_size), metadata.base_decimals
        )

    def quote(lots: int) -> str:
        return to_decimal_string(
            lots_to_amount(lots, metadata.quote_lot_size), metadata.quote_decimals
        )

    return [
        "--------------------------------",
        f"Trader pubkey: {pubkey}",
        f"Base token locked: {base(state.base_lots_locked)}",
        f"Base token free: {base(state.base_lots_free)}",
        f"Quote token locked: {quote(state.quote_lots_locked)}",
        f"Quote token free: {quote(state.quote_lots_free)}",
    ]
