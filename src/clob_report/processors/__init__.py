from __future__ import annotations

from .revenue import (
    AggregationError,
    MarketLoadFailed,
    MarketRevenue,
    PriceFeedUnavailable,
    RevenueReport,
    UnsupportedQuoteCurrency,
    aggregate_revenue,
)

__all__ = [
    "AggregationError",
    "MarketLoadFailed",
    "MarketRevenue",
    "PriceFeedUnavailable",
    "RevenueReport",
    "UnsupportedQuoteCurrency",
    "aggregate_revenue",
]
