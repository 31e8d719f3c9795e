from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ...settings import ReportSettings


class PriceFeedError(Exception):
    """Raised when a spot price cannot be obtained or is malformed."""


@dataclass(frozen=True)
class PriceQuote:
    """Spot rate at query time: one ``base_symbol`` costs ``price`` ``quote_symbol``."""

    base_symbol: str
    quote_symbol: str
    price: Decimal


class BasePriceAdapter(ABC):
    """Abstract base class for spot price sources."""

    def __init__(self, config: ReportSettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_spot_price(self, base_symbol: str, quote_symbol: str) -> PriceQuote:
        """Fetch the spot price of ``base_symbol`` in ``quote_symbol``."""
        ...

    def validate_quote(self, quote: PriceQuote) -> PriceQuote:
        """Raise if the quoted price is not strictly positive."""
        if not quote.price.is_finite() or quote.price <= 0:
            raise PriceFeedError(
                f"Non-positive price for {quote.base_symbol}-{quote.quote_symbol}: {quote.price}"
            )
        return quote
