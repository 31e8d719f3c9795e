from clob_report.domain import Fill, FillSummary, MarketEvent, Place, Reduce, Side
from clob_report.report.events import (
    EVENT_SCHEMA,
    event_record,
    event_records,
    format_event_record,
    format_market_events,
)

BID_SEQUENCE = (1 << 63) | 5


def _event(details, market="M1", kind=None, index=0):
    return MarketEvent(
        market=market,
        event_kind=kind or type(details).__name__,
        timestamp=1700000000,
        signature="sig1",
        slot=250_000_000,
        sequence_number=10,
        event_index=index,
        details=details,
    )


def test_fill_record(sol_usdc):
    event = _event(Fill("MAKER", "TAKER", 150_000, 20, Side.ASK))

    record = event_record(sol_usdc, event)

    assert tuple(record) == EVENT_SCHEMA
    assert record == {
        "market": "M1",
        "event_type": "Fill",
        "timestamp": "1700000000",
        "signature": "sig1",
        "slot": "250000000",
        "sequence_number": "10",
        "event_index": "0",
        "maker": "MAKER",
        "taker": "TAKER",
        "price": "150.0",
        "side": "Ask",
        "quantity": "0.020000000",
    }


def test_place_and_reduce_side_from_sequence_number(sol_usdc):
    place = event_record(sol_usdc, _event(Place("MAKER", BID_SEQUENCE, 149_500, 1_000)))
    reduce = event_record(sol_usdc, _event(Reduce("MAKER", 7, 150_500, 250)))

    assert place["side"] == "Bid"
    assert place["taker"] == ""
    assert place["quantity"] == "1.000000000"
    assert reduce["side"] == "Ask"
    assert reduce["event_type"] == "Reduce"
    assert reduce["price"] == "150.5"


def test_other_kinds_have_no_record(sol_usdc):
    assert event_record(sol_usdc, _event(None, kind="Evict")) is None
    assert event_record(sol_usdc, _event(FillSummary(100))) is None


def test_format_event_record_keeps_schema_order(sol_usdc):
    record = event_record(sol_usdc, _event(Fill("MAKER", "TAKER", 150_000, 20, Side.BID)))

    line = format_event_record(record)

    assert line.startswith("market: M1, event_type: Fill, timestamp: 1700000000")
    assert line.endswith("price: 150.0, side: Bid, quantity: 0.020000000")


def test_event_records_filter_by_market(sol_usdc):
    events = [
        _event(Fill("A", "B", 150_000, 1, Side.ASK)),
        _event(Fill("C", "D", 150_000, 1, Side.ASK), market="M2"),
        _event(None, kind="Evict"),
    ]

    records = event_records(sol_usdc, "M1", events)

    assert [r["maker"] for r in records] == ["A"]


def test_format_market_events(sol_usdc):
    events = [
        _event(Place("MAKER", BID_SEQUENCE, 149_500, 1_000), index=0),
        _event(Fill("MAKER", "TAKER", 149_500, 10, Side.BID), index=1),
        _event(FillSummary(total_quote_fees=2_500_000), index=2),
        _event(FillSummary(total_quote_fees=9_999), market="M2", index=3),
        _event(None, kind="TimeInForce", index=4),
    ]

    lines = format_market_events(sol_usdc, "M1", events)

    assert len(lines) == 3
    assert "event_type: Place" in lines[0]
    assert "event_type: Fill" in lines[1]
    assert lines[2] == "Total quote token fees paid: 2.5"
