"""Loaders for exported order-book and event-log snapshots.

Book snapshot::

    {"bids": [{"price_in_ticks": 1500, "size_in_base_lots": 20}],
     "asks": [...],
     "traders": {"<pubkey>": {"base_lots_free": 10, "quote_lots_locked": 0}}}

Event snapshot: a list of events, or ``{"events": [...]}``, where each event
carries ``market``, ``event_type``, ``timestamp``, ``signature``, ``slot``,
``sequence_number``, ``event_index`` and a ``details`` object.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError

from ..domain import (
    Fill,
    FillSummary,
    Ladder,
    LadderLevel,
    MarketEvent,
    Place,
    Reduce,
    Side,
    TraderState,
)

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read or does not match its schema."""


class _LevelModel(BaseModel):
    price_in_ticks: NonNegativeInt
    size_in_base_lots: NonNegativeInt


class _TraderModel(BaseModel):
    quote_lots_locked: NonNegativeInt = 0
    quote_lots_free: NonNegativeInt = 0
    base_lots_locked: NonNegativeInt = 0
    base_lots_free: NonNegativeInt = 0


class _BookModel(BaseModel):
    bids: list[_LevelModel] = Field(default_factory=list)
    asks: list[_LevelModel] = Field(default_factory=list)
    traders: dict[str, _TraderModel] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class _FillModel(BaseModel):
    maker: str
    taker: str
    price_in_ticks: NonNegativeInt
    base_lots_filled: NonNegativeInt
    side_filled: Side
    order_sequence_number: NonNegativeInt = 0

    model_config = ConfigDict(extra="ignore")


class _PlaceModel(BaseModel):
    maker: str
    order_sequence_number: NonNegativeInt
    price_in_ticks: NonNegativeInt
    base_lots_placed: NonNegativeInt
    client_order_id: NonNegativeInt = 0

    model_config = ConfigDict(extra="ignore")


class _ReduceModel(BaseModel):
    maker: str
    order_sequence_number: NonNegativeInt
    price_in_ticks: NonNegativeInt
    base_lots_removed: NonNegativeInt
    base_lots_remaining: NonNegativeInt = 0

    model_config = ConfigDict(extra="ignore")


class _FillSummaryModel(BaseModel):
    total_quote_fees: NonNegativeInt
    client_order_id: NonNegativeInt = 0
    total_base_lots_filled: NonNegativeInt = 0
    total_quote_lots_filled: NonNegativeInt = 0

    model_config = ConfigDict(extra="ignore")


class _EventModel(BaseModel):
    market: str
    event_type: str
    timestamp: int
    signature: str
    slot: NonNegativeInt
    sequence_number: NonNegativeInt
    event_index: NonNegativeInt
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


_DETAIL_MODELS: dict[str, tuple[type[BaseModel], type]] = {
    "fill": (_FillModel, Fill),
    "place": (_PlaceModel, Place),
    "reduce": (_ReduceModel, Reduce),
    "fillsummary": (_FillSummaryModel, FillSummary),
}


def _normalize_kind(event_type: str) -> str:
    return event_type.replace("_", "").replace("-", "").lower()


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in snapshot {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid UTF-8: {e}") from e


def parse_book(data: Any) -> tuple[Ladder, dict[str, TraderState]]:
    try:
        model = _BookModel.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid book snapshot: {e}") from e

    ladder = Ladder(
        bids=[LadderLevel(**level.model_dump()) for level in model.bids],
        asks=[LadderLevel(**level.model_dump()) for level in model.asks],
    )
    traders = {
        pubkey: TraderState(**trader.model_dump())
        for pubkey, trader in model.traders.items()
    }
    return ladder, traders


def parse_event(data: Any) -> MarketEvent:
    try:
        model = _EventModel.model_validate(data)
        detail_spec = _DETAIL_MODELS.get(_normalize_kind(model.event_type))
        details = None
        if detail_spec is not None:
            detail_model, detail_cls = detail_spec
            details = detail_cls(**detail_model.model_validate(model.details).model_dump())
    except ValidationError as e:
        raise SnapshotError(f"Invalid market event: {e}") from e

    return MarketEvent(
        market=model.market,
        event_kind=model.event_type,
        timestamp=model.timestamp,
        signature=model.signature,
        slot=model.slot,
        sequence_number=model.sequence_number,
        event_index=model.event_index,
        details=details,
    )


def parse_events(data: Any) -> list[MarketEvent]:
    if isinstance(data, dict):
        data = data.get("events")
    if not isinstance(data, list):
        raise SnapshotError("Event snapshot must be a list or contain an 'events' list")
    events = [parse_event(item) for item in data]
    logger.debug("Parsed %d market events", len(events))
    return events


def load_book_snapshot(path: Path) -> tuple[Ladder, dict[str, TraderState]]:
    """Load a ladder and trader balances from a JSON snapshot."""
    return parse_book(_read_json(path))


def load_event_snapshot(path: Path) -> list[MarketEvent]:
    """Load market events from a JSON snapshot."""
    return parse_events(_read_json(path))
