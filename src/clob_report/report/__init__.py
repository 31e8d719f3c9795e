from __future__ import annotations

from .book import format_book, format_trader_state
from .events import event_records, format_market_events
from .formatter import format_market_details, format_revenue_report

__all__ = [
    "event_records",
    "format_book",
    "format_market_details",
    "format_market_events",
    "format_revenue_report",
    "format_trader_state",
]
