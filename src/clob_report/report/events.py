"""Line-oriented market event log."""

from __future__ import annotations

from collections.abc import Iterable

from ..domain import Fill, FillSummary, MarketEvent, MarketMetadata, Place, Reduce, Side
from ..units import lots_to_amount, quote_atoms_to_float, ticks_to_price, to_decimal_string

EVENT_BASE_SCHEMA = (
    "market",
    "event_type",
    "timestamp",
    "signature",
    "slot",
    "sequence_number",
    "event_index",
)
EVENT_DATA_SCHEMA = ("maker", "taker", "price", "side", "quantity")
EVENT_SCHEMA = EVENT_BASE_SCHEMA + EVENT_DATA_SCHEMA


def _quantity(metadata: MarketMetadata, base_lots: int) -> str:
    return to_decimal_string(
        lots_to_amount(base_lots, metadata.base_lot_size), metadata.base_decimals
    )


def _price(metadata: MarketMetadata, ticks: int) -> str:
    return str(
        ticks_to_price(
            ticks,
            metadata.tick_size_in_quote_atoms_per_base_unit,
            metadata.quote_decimals,
            metadata.raw_base_units_per_base_unit,
        )
    )


def event_record(metadata: MarketMetadata, event: MarketEvent) -> dict[str, str] | None:
    """Map a fill, place or reduce event onto the fixed log schema.

    Returns None for every other event kind.
    """
    details = event.details
    if isinstance(details, Fill):
        event_type = "Fill"
        data = (
            details.maker,
            details.taker,
            _price(metadata, details.price_in_ticks),
            details.side_filled.value,
            _quantity(metadata, details.base_lots_filled),
        )
    elif isinstance(details, Place):
        event_type = "Place"
        data = (
            details.maker,
            "",
            _price(metadata, details.price_in_ticks),
            Side.from_order_sequence_number(details.order_sequence_number).value,
            _quantity(metadata, details.base_lots_placed),
        )
    elif isinstance(details, Reduce):
        event_type = "Reduce"
        data = (
            details.maker,
            "",
            _price(metadata, details.price_in_ticks),
            Side.from_order_sequence_number(details.order_sequence_number).value,
            _quantity(metadata, details.base_lots_removed),
        )
    else:
        return None

    base = (
        event.market,
        event_type,
        str(event.timestamp),
        event.signature,
        str(event.slot),
        str(event.sequence_number),
        str(event.event_index),
    )
    return dict(zip(EVENT_SCHEMA, base + data))


def format_event_record(record: dict[str, str]) -> str:
    return ", ".join(f"{key}: {record[key]}" for key in EVENT_SCHEMA)


def event_records(
    metadata: MarketMetadata, market: str, events: Iterable[MarketEvent]
) -> list[dict[str, str]]:
    """Schema records of the fill, place and reduce events of ``market``."""
    records = []
    for event in events:
        if event.market != market:
            continue
        record = event_record(metadata, event)
        if record is not None:
            records.append(record)
    return records


def format_market_events(
    metadata: MarketMetadata, market: str, events: Iterable[MarketEvent]
) -> list[str]:
    """Render the event log of one market.

    Fill, place and reduce events become one ``key: value`` line each; a fill
    summary reports the quote fees paid. Events of other markets and other
    event kinds are skipped.
    """
    lines: list[str] = []
    for event in events:
        if event.market != market:
            continue
        if isinstance(event.details, FillSummary):
            fees = quote_atoms_to_float(
                event.details.total_quote_fees, metadata.quote_decimals
            )
            lines.append(f"Total quote token fees paid: {fees}")
            continue
        record = event_record(metadata, event)
        if record is not None:
            lines.append(format_event_record(record))
    return lines
