from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from decimal import Decimal, localcontext
from typing import Protocol

from ..adapters.price_adapters.base import PriceFeedError, PriceQuote
from ..clients.ledger import (
    LedgerClient,
    LedgerError,
    decode_market_header,
    decode_uncollected_fee_lots,
)
from ..constants import REFERENCE_CURRENCY, SUPPORTED_QUOTE_CURRENCIES
from ..logger import get_logger
from ..units import lots_to_amount, to_decimal

logger = get_logger(__name__)

# Wide enough for 10k markets x 1e12 atoms at 19 decimals, times a spot rate.
REVENUE_PRECISION = 50


class AggregationError(Exception):
    """Base class for failures that abort a revenue run."""


class MarketLoadFailed(AggregationError):
    """Raised when a market's metadata or account state cannot be loaded."""

    def __init__(self, market_id: str):
        self.market_id = market_id
        super().__init__(f"Failed to load market {market_id}")


class UnsupportedQuoteCurrency(AggregationError):
    """Raised when a market is quoted in a currency that cannot be priced."""

    def __init__(self, market_id: str, symbol: str):
        self.market_id = market_id
        self.symbol = symbol
        super().__init__(
            f"The {market_id} market is using an unsupported quote token: {symbol}"
        )


class PriceFeedUnavailable(AggregationError):
    """Raised when a currency with revenue could not be priced."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Failed to get a spot price for {symbol}")


class SymbolResolver(Protocol):
    def resolve(self, mint: str) -> str: ...


class SpotPriceSource(Protocol):
    async def fetch_spot_price(
        self, base_symbol: str, quote_symbol: str
    ) -> PriceQuote: ...


@dataclass(frozen=True)
class MarketRevenue:
    """Uncollected fees of one market."""

    market_id: str
    quote_symbol: str
    uncollected_fee_lots: int
    uncollected_fee_atoms: int
    amount: Decimal


@dataclass
class RevenueReport:
    """Point-in-time uncollected revenue, per currency and converted."""

    reference_currency: str
    currency_totals: dict[str, Decimal]
    converted_total: Decimal
    rates: dict[str, Decimal] = field(default_factory=dict)
    markets: list[MarketRevenue] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Convert report to a JSON-friendly dict, Decimals as strings."""
        return {
            "reference_currency": self.reference_currency,
            "currency_totals": {k: str(v) for k, v in self.currency_totals.items()},
            "converted_total": str(self.converted_total),
            "rates": {k: str(v) for k, v in self.rates.items()},
            "markets": [
                {**asdict(m), "amount": str(m.amount)} for m in self.markets
            ],
        }


async def _load_market_revenue(
    market_id: str, ledger: LedgerClient, symbols: SymbolResolver
) -> MarketRevenue:
    try:
        # metadata and fee counters come from the same account read
        raw_state = await ledger.get_raw_account_state(market_id)
        metadata = decode_market_header(raw_state).metadata()
        fee_lots = decode_uncollected_fee_lots(raw_state)
    except LedgerError as e:
        logger.error("Failed to load market %s: %s", market_id, e)
        raise MarketLoadFailed(market_id) from e

    fee_atoms = lots_to_amount(fee_lots, metadata.quote_lot_size)
    return MarketRevenue(
        market_id=market_id,
        quote_symbol=symbols.resolve(metadata.quote_mint),
        uncollected_fee_lots=fee_lots,
        uncollected_fee_atoms=fee_atoms,
        amount=to_decimal(fee_atoms, metadata.quote_decimals),
    )


async def aggregate_revenue(
    market_ids: Sequence[str],
    ledger: LedgerClient,
    symbols: SymbolResolver,
    oracle: SpotPriceSource,
    supported_currencies: Iterable[str] = SUPPORTED_QUOTE_CURRENCIES,
    reference_currency: str = REFERENCE_CURRENCY,
) -> RevenueReport:
    """Aggregate uncollected fee revenue across markets.

    Markets are processed sequentially in the given order. The run is
    all-or-nothing: the first market that cannot be loaded, or whose quote
    currency is outside ``supported_currencies``, aborts it, and the raised
    error carries only the market and symbol, never partial totals.

    After accumulation every non-reference currency with a non-zero total is
    priced exactly once against ``reference_currency``. Currencies whose
    total is zero are not priced at all.

    Args:
        market_ids: Markets to include, in processing order
        ledger: Source of raw market account state, read once per market
        symbols: Maps quote mints to ticker symbols
        oracle: Spot price source
        supported_currencies: Closed set of quote currencies that can be priced
        reference_currency: Currency of the converted grand total

    Returns:
        Per-currency totals, rates used and the converted grand total

    Raises:
        MarketLoadFailed: A market could not be read or decoded
        UnsupportedQuoteCurrency: A market is quoted in an unsupported currency
        PriceFeedUnavailable: A currency with revenue could not be priced
    """
    supported = {s.upper() for s in supported_currencies}
    reference = reference_currency.upper()
    if reference not in supported:
        raise ValueError(
            f"Reference currency {reference} is not among supported currencies {sorted(supported)}"
        )

    totals: dict[str, Decimal] = {}
    markets: list[MarketRevenue] = []

    with localcontext() as ctx:
        ctx.prec = REVENUE_PRECISION

        for market_id in market_ids:
            revenue = await _load_market_revenue(market_id, ledger, symbols)
            if revenue.quote_symbol not in supported:
                raise UnsupportedQuoteCurrency(market_id, revenue.quote_symbol)

            logger.debug(
                "Market %s: %s %s uncollected (%d lots)",
                market_id,
                revenue.amount,
                revenue.quote_symbol,
                revenue.uncollected_fee_lots,
            )
            totals[revenue.quote_symbol] = (
                totals.get(revenue.quote_symbol, Decimal(0)) + revenue.amount
            )
            markets.append(revenue)

        rates: dict[str, Decimal] = {}
        for symbol, total in totals.items():
            if symbol == reference:
                rates[symbol] = Decimal(1)
                continue
            if total == 0:
                logger.debug("Skipping price fetch for %s: nothing accumulated", symbol)
                continue
            try:
                quote = await oracle.fetch_spot_price(symbol, reference)
            except PriceFeedError as e:
                logger.error("Price feed failed for %s-%s: %s", symbol, reference, e)
                raise PriceFeedUnavailable(symbol) from e
            rates[symbol] = quote.price

        converted_total = sum(
            (total * rates.get(symbol, Decimal(0)) for symbol, total in totals.items()),
            Decimal(0),
        )

    logger.info(
        "Aggregated uncollected revenue of %d markets: %s %s",
        len(markets),
        converted_total,
        reference,
    )
    return RevenueReport(
        reference_currency=reference,
        currency_totals=totals,
        converted_total=converted_total,
        rates=rates,
        markets=markets,
    )
