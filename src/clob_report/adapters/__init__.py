from __future__ import annotations

from .price_adapters import PRICE_ADAPTERS, get_price_adapter_class

__all__ = ["PRICE_ADAPTERS", "get_price_adapter_class"]
