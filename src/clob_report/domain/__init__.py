"""Domain models for market state, order books and market events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class MarketMetadata:
    """Per-market unit parameters, read once per report run."""

    base_mint: str
    quote_mint: str
    base_decimals: int
    quote_decimals: int
    base_lot_size: int  # base atoms per base lot
    quote_lot_size: int  # quote atoms per quote lot
    tick_size_in_quote_atoms_per_base_unit: int
    raw_base_units_per_base_unit: int = 1


@dataclass(frozen=True)
class TokenParams:
    decimals: int
    vault_bump: int
    mint_key: str
    vault_key: str


@dataclass(frozen=True)
class MarketHeader:
    """Decoded fixed-size market account header."""

    discriminant: int
    status: int
    bids_size: int
    asks_size: int
    num_seats: int
    base_params: TokenParams
    base_lot_size: int
    quote_params: TokenParams
    quote_lot_size: int
    tick_size_in_quote_atoms_per_base_unit: int
    authority: str
    fee_recipient: str
    market_sequence_number: int
    successor: str
    raw_base_units_per_base_unit: int

    def metadata(self) -> MarketMetadata:
        return MarketMetadata(
            base_mint=self.base_params.mint_key,
            quote_mint=self.quote_params.mint_key,
            base_decimals=self.base_params.decimals,
            quote_decimals=self.quote_params.decimals,
            base_lot_size=self.base_lot_size,
            quote_lot_size=self.quote_lot_size,
            tick_size_in_quote_atoms_per_base_unit=self.tick_size_in_quote_atoms_per_base_unit,
            raw_base_units_per_base_unit=max(self.raw_base_units_per_base_unit, 1),
        )


@dataclass(frozen=True)
class MarketState:
    """Header plus the fee counters of the market body."""

    header: MarketHeader
    base_lots_per_base_unit: int
    tick_size_in_quote_lots_per_base_unit: int
    order_sequence_number: int
    taker_fee_bps: int
    collected_quote_lot_fees: int
    uncollected_quote_lot_fees: int


class Side(str, Enum):
    BID = "Bid"
    ASK = "Ask"

    @classmethod
    def from_order_sequence_number(cls, order_sequence_number: int) -> "Side":
        """Bid order sequence numbers are stored bit-inverted, so their top bit is set."""
        if order_sequence_number >> 63 & 1:
            return cls.BID
        return cls.ASK


@dataclass(frozen=True)
class LadderLevel:
    price_in_ticks: int
    size_in_base_lots: int


@dataclass(frozen=True)
class Ladder:
    """Aggregated book levels, each side ordered best price first."""

    bids: list[LadderLevel] = field(default_factory=list)
    asks: list[LadderLevel] = field(default_factory=list)


@dataclass(frozen=True)
class TraderState:
    quote_lots_locked: int = 0
    quote_lots_free: int = 0
    base_lots_locked: int = 0
    base_lots_free: int = 0

    @property
    def is_empty(self) -> bool:
        return not (
            self.base_lots_locked
            or self.base_lots_free
            or self.quote_lots_locked
            or self.quote_lots_free
        )


@dataclass(frozen=True)
class Fill:
    maker: str
    taker: str
    price_in_ticks: int
    base_lots_filled: int
    side_filled: Side
    order_sequence_number: int = 0


@dataclass(frozen=True)
class Place:
    maker: str
    order_sequence_number: int
    price_in_ticks: int
    base_lots_placed: int
    client_order_id: int = 0


@dataclass(frozen=True)
class Reduce:
    maker: str
    order_sequence_number: int
    price_in_ticks: int
    base_lots_removed: int
    base_lots_remaining: int = 0


@dataclass(frozen=True)
class FillSummary:
    total_quote_fees: int  # quote atoms
    client_order_id: int = 0
    total_base_lots_filled: int = 0
    total_quote_lots_filled: int = 0


EventDetails = Union[Fill, Place, Reduce, FillSummary, None]


@dataclass(frozen=True)
class MarketEvent:
    """A single event emitted by a market instruction.

    ``details`` is None for event kinds the log does not render
    (evictions, expirations, fees, time-in-force markers).
    """

    market: str
    event_kind: str
    timestamp: int
    signature: str
    slot: int
    sequence_number: int
    event_index: int
    details: EventDetails = None


__all__ = [
    "EventDetails",
    "Fill",
    "FillSummary",
    "Ladder",
    "LadderLevel",
    "MarketEvent",
    "MarketHeader",
    "MarketMetadata",
    "MarketState",
    "Place",
    "Reduce",
    "Side",
    "TokenParams",
    "TraderState",
]
