import json
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from clob_report.adapters.price_adapters import (
    PRICE_ADAPTERS,
    CoinbaseSpotAdapter,
    get_price_adapter_class,
)
from clob_report.adapters.price_adapters.base import PriceFeedError
from clob_report.constants import PRICE_SOURCES
from clob_report.settings import ReportSettings


@pytest.fixture
def config():
    return ReportSettings(
        price_api_url="https://api.coinbase.example/v2/",
        price_timeout=3.0,
    )


def _response(payload=None, status=200, text=None):
    response = Mock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status} error"
        )
    else:
        response.raise_for_status.return_value = None
    if text is not None:
        response.json.side_effect = json.JSONDecodeError("bad", text, 0)
    else:
        response.json.return_value = payload
    return response


@pytest.mark.asyncio
async def test_fetch_spot_price_parses_amount(monkeypatch, config):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _response({"data": {"amount": "150.25", "base": "SOL", "currency": "USDC"}})

    monkeypatch.setattr(requests, "get", fake_get)
    adapter = CoinbaseSpotAdapter(config)

    quote = await adapter.fetch_spot_price("sol", "usdc")

    assert quote.base_symbol == "SOL"
    assert quote.quote_symbol == "USDC"
    assert quote.price == Decimal("150.25")
    assert calls == [("https://api.coinbase.example/v2/prices/SOL-USDC/spot", 3.0)]


@pytest.mark.asyncio
async def test_fetch_spot_price_network_error(monkeypatch, config):
    def fake_get(url, timeout):
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(PriceFeedError, match="Failed to get price data for USDT-USDC"):
        await CoinbaseSpotAdapter(config).fetch_spot_price("USDT", "USDC")


@pytest.mark.asyncio
async def test_fetch_spot_price_http_error(monkeypatch, config):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _response(status=500))

    with pytest.raises(PriceFeedError):
        await CoinbaseSpotAdapter(config).fetch_spot_price("USDT", "USDC")


@pytest.mark.asyncio
async def test_fetch_spot_price_invalid_json(monkeypatch, config):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _response(text="<html>"))

    with pytest.raises(PriceFeedError, match="Invalid JSON"):
        await CoinbaseSpotAdapter(config).fetch_spot_price("USDT", "USDC")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data": {}},
        {"data": "nope"},
        {"errors": [{"id": "not_found"}]},
        ["data"],
    ],
)
async def test_fetch_spot_price_missing_amount(monkeypatch, config, payload):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _response(payload))

    with pytest.raises(PriceFeedError, match="Invalid response structure"):
        await CoinbaseSpotAdapter(config).fetch_spot_price("USDT", "USDC")


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["abc", "0", "-1", "NaN"])
async def test_fetch_spot_price_rejects_bad_amounts(monkeypatch, config, amount):
    monkeypatch.setattr(
        requests, "get", lambda url, timeout: _response({"data": {"amount": amount}})
    )

    with pytest.raises(PriceFeedError):
        await CoinbaseSpotAdapter(config).fetch_spot_price("USDT", "USDC")


def test_get_price_adapter_class():
    assert get_price_adapter_class("Coinbase") is CoinbaseSpotAdapter
    with pytest.raises(ValueError, match="Unknown price source"):
        get_price_adapter_class("pyth")


def test_registry_matches_configurable_sources():
    assert set(PRICE_ADAPTERS) == set(PRICE_SOURCES)
