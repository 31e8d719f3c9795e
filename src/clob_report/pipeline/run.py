"""Command pipelines: wire collaborators from settings and fetch report data."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from ..adapters.price_adapters import BasePriceAdapter, get_price_adapter_class
from ..clients.ledger import SolanaRpcLedgerClient
from ..clients.symbols import MintSymbolResolver
from ..domain import MarketMetadata, MarketState
from ..processors.revenue import RevenueReport, aggregate_revenue
from ..settings import ReportSettings
from ..state import AppState


@dataclass(frozen=True)
class MarketDetails:
    market_id: str
    state: MarketState
    base_vault_amount: int
    quote_vault_amount: int


def build_ledger_client(settings: ReportSettings) -> SolanaRpcLedgerClient:
    return SolanaRpcLedgerClient(settings.rpc_url_required, timeout=settings.rpc_timeout)


def build_price_adapter(settings: ReportSettings) -> BasePriceAdapter:
    adapter_class = get_price_adapter_class(settings.price_source)
    return adapter_class(settings)


async def run_revenue_report(
    state: AppState, market_ids: Sequence[str] | None = None
) -> RevenueReport:
    """Aggregate uncollected revenue of the given (or configured) markets.

    Args:
        state: Application state containing settings and logger
        market_ids: Markets to include; defaults to ``settings.markets``

    Returns:
        The aggregated revenue report
    """
    s = state.settings
    log = state.logger

    markets = list(market_ids) if market_ids else list(s.markets)
    if not markets:
        log.warning("No markets given or configured; the report will be empty")

    ledger = build_ledger_client(s)
    symbols = MintSymbolResolver(s.mint_symbol_map)
    oracle = build_price_adapter(s)

    log.info("Retrieving uncollected fees for %d markets...", len(markets))
    return await aggregate_revenue(
        markets,
        ledger,
        symbols,
        oracle,
        supported_currencies=s.supported_currencies,
        reference_currency=s.reference_currency,
    )


async def run_market_report(state: AppState, market_id: str) -> MarketDetails:
    """Load a market account and the balances of its two vaults."""
    log = state.logger
    ledger = build_ledger_client(state.settings)

    log.info("Loading market %s...", market_id)
    market_state = await ledger.get_market_state(market_id)
    header = market_state.header

    log.debug(
        "Fetching vault balances %s / %s",
        header.base_params.vault_key,
        header.quote_params.vault_key,
    )
    base_amount, quote_amount = await asyncio.gather(
        ledger.get_token_account_amount(header.base_params.vault_key),
        ledger.get_token_account_amount(header.quote_params.vault_key),
    )
    return MarketDetails(
        market_id=market_id,
        state=market_state,
        base_vault_amount=base_amount,
        quote_vault_amount=quote_amount,
    )


async def load_market_metadata(state: AppState, market_id: str) -> MarketMetadata:
    ledger = build_ledger_client(state.settings)
    return await ledger.get_market_metadata(market_id)
