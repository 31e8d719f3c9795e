from __future__ import annotations

from collections.abc import Mapping

from ..constants import UNKNOWN_SYMBOL


class MintSymbolResolver:
    """Maps token mint addresses to ticker symbols."""

    def __init__(self, mint_symbols: Mapping[str, str]):
        self._symbols = {mint: symbol.upper() for mint, symbol in mint_symbols.items()}

    def resolve(self, mint: str) -> str:
        """Return the ticker for ``mint``, or ``UNKNOWN`` if it is not configured."""
        return self._symbols.get(mint, UNKNOWN_SYMBOL)
