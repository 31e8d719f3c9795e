import json

import pytest

from clob_report.clients.snapshots import (
    SnapshotError,
    load_book_snapshot,
    load_event_snapshot,
    parse_book,
    parse_event,
    parse_events,
)
from clob_report.domain import Fill, FillSummary, LadderLevel, Place, Reduce, Side


def _event(event_type, details=None, market="M1", **overrides):
    event = {
        "market": market,
        "event_type": event_type,
        "timestamp": 1700000000,
        "signature": "sig1",
        "slot": 250_000_000,
        "sequence_number": 10,
        "event_index": 0,
        "details": details or {},
    }
    event.update(overrides)
    return event


def test_parse_book_levels_and_traders():
    ladder, traders = parse_book(
        {
            "bids": [{"price_in_ticks": 100, "size_in_base_lots": 5}],
            "asks": [
                {"price_in_ticks": 101, "size_in_base_lots": 2},
                {"price_in_ticks": 102, "size_in_base_lots": 7},
            ],
            "traders": {"T1": {"base_lots_free": 3}},
        }
    )

    assert ladder.bids == [LadderLevel(100, 5)]
    assert ladder.asks[1] == LadderLevel(102, 7)
    assert traders["T1"].base_lots_free == 3
    assert traders["T1"].quote_lots_locked == 0


def test_parse_book_rejects_negative_sizes():
    with pytest.raises(SnapshotError, match="Invalid book snapshot"):
        parse_book({"bids": [{"price_in_ticks": 1, "size_in_base_lots": -1}]})


def test_parse_fill_event():
    event = parse_event(
        _event(
            "Fill",
            {
                "maker": "MAKER",
                "taker": "TAKER",
                "price_in_ticks": 1500,
                "base_lots_filled": 20,
                "side_filled": "Ask",
            },
        )
    )

    assert event.market == "M1"
    assert event.event_kind == "Fill"
    assert event.details == Fill("MAKER", "TAKER", 1500, 20, Side.ASK)


def test_parse_place_reduce_and_summary():
    place = parse_event(
        _event(
            "place",
            {
                "maker": "MAKER",
                "order_sequence_number": 3,
                "price_in_ticks": 10,
                "base_lots_placed": 1,
            },
        )
    )
    reduce = parse_event(
        _event(
            "Reduce",
            {
                "maker": "MAKER",
                "order_sequence_number": 3,
                "price_in_ticks": 10,
                "base_lots_removed": 1,
            },
        )
    )
    summary = parse_event(_event("fill_summary", {"total_quote_fees": 250}))

    assert isinstance(place.details, Place)
    assert isinstance(reduce.details, Reduce)
    assert summary.details == FillSummary(total_quote_fees=250)


def test_parse_other_event_kinds_without_details():
    event = parse_event(_event("Evict", {"maker": "X"}))

    assert event.details is None
    assert event.event_kind == "Evict"


def test_parse_event_missing_detail_field():
    with pytest.raises(SnapshotError, match="Invalid market event"):
        parse_event(_event("Fill", {"maker": "MAKER"}))


def test_parse_events_accepts_list_or_wrapper():
    events = [_event("Evict"), _event("Evict", event_index=1)]

    assert len(parse_events(events)) == 2
    assert len(parse_events({"events": events})) == 2
    with pytest.raises(SnapshotError):
        parse_events({"items": events})


def test_load_snapshots_from_files(tmp_path):
    book_path = tmp_path / "book.json"
    book_path.write_text(json.dumps({"bids": [], "asks": []}))
    events_path = tmp_path / "events.json"
    events_path.write_text(json.dumps({"events": [_event("Evict")]}))

    ladder, traders = load_book_snapshot(book_path)
    assert ladder.bids == [] and traders == {}
    assert len(load_event_snapshot(events_path)) == 1


def test_load_snapshot_errors(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")

    with pytest.raises(SnapshotError, match="Invalid JSON"):
        load_book_snapshot(bad)
    with pytest.raises(SnapshotError, match="Cannot read"):
        load_event_snapshot(tmp_path / "missing.json")


def test_load_snapshot_rejects_non_utf8(tmp_path):
    path = tmp_path / "events.json"
    path.write_bytes(b"\xff\xfe[]")

    with pytest.raises(SnapshotError, match="not valid UTF-8") as exc_info:
        load_event_snapshot(path)

    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
    with pytest.raises(SnapshotError):
        load_book_snapshot(path)
