from __future__ import annotations

from .base import BasePriceAdapter, PriceFeedError, PriceQuote
from .coinbase import CoinbaseSpotAdapter

PRICE_ADAPTERS: dict[str, type[BasePriceAdapter]] = {
    "coinbase": CoinbaseSpotAdapter,
}


def get_price_adapter_class(adapter_name: str) -> type[BasePriceAdapter]:
    """Get price adapter class by name.

    Args:
        adapter_name: Name of the adapter (case-insensitive)

    Returns:
        Adapter class

    Raises:
        ValueError: If adapter_name is not recognized
    """
    adapter_name_normalized = adapter_name.lower()
    if adapter_name_normalized not in PRICE_ADAPTERS:
        raise ValueError(
            f"Unknown price source '{adapter_name}'. "
            f"Available: {', '.join(PRICE_ADAPTERS.keys())}"
        )
    return PRICE_ADAPTERS[adapter_name_normalized]


__all__ = [
    "PRICE_ADAPTERS",
    "BasePriceAdapter",
    "CoinbaseSpotAdapter",
    "PriceFeedError",
    "PriceQuote",
    "get_price_adapter_class",
]
