from __future__ import annotations

from .ledger import (
    LedgerClient,
    LedgerError,
    MarketDecodeError,
    MarketNotFoundError,
    SolanaRpcLedgerClient,
)
from .symbols import MintSymbolResolver

__all__ = [
    "LedgerClient",
    "LedgerError",
    "MarketDecodeError",
    "MarketNotFoundError",
    "MintSymbolResolver",
    "SolanaRpcLedgerClient",
]
