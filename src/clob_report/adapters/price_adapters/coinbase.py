from __future__ import annotations

import asyncio
import json
import logging
from decimal import Decimal, InvalidOperation

import requests

from ...settings import ReportSettings
from .base import BasePriceAdapter, PriceFeedError, PriceQuote

logger = logging.getLogger(__name__)


class CoinbaseSpotAdapter(BasePriceAdapter):
    """Adapter for the Coinbase public spot price endpoint.

    Makes one request per price; failures surface as PriceFeedError and are
    not retried.
    """

    def __init__(self, config: ReportSettings):
        super().__init__(config)
        self.api_base_url = config.price_api_url.rstrip("/")
        self.timeout = config.price_timeout

    @property
    def adapter_name(self) -> str:
        return "coinbase"

    async def fetch_spot_price(self, base_symbol: str, quote_symbol: str) -> PriceQuote:
        """Fetch the spot price of ``base_symbol`` denominated in ``quote_symbol``.

        Args:
            base_symbol: Ticker being priced, e.g. ``SOL``
            quote_symbol: Ticker the price is expressed in, e.g. ``USDC``

        Returns:
            The quote with the price as a Decimal to avoid float precision loss

        Raises:
            PriceFeedError: On network errors, invalid JSON, a missing
                ``data.amount`` field or a non-positive price
        """
        pair = f"{base_symbol.upper()}-{quote_symbol.upper()}"
        url = f"{self.api_base_url}/prices/{pair}/spot"
        logger.debug(f"Calling {url}")
        try:
            response = await asyncio.to_thread(requests.get, url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PriceFeedError(f"Failed to get price data for {pair}: {e}") from e

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise PriceFeedError(f"Invalid JSON from Coinbase for {pair}") from e

        payload = data.get("data") if isinstance(data, dict) else None
        amount = payload.get("amount") if isinstance(payload, dict) else None
        if amount is None:
            raise PriceFeedError(f"Invalid response structure for {pair}: {data}")

        try:
            price = Decimal(str(amount))
        except InvalidOperation as e:
            raise PriceFeedError(f"Invalid price value for {pair}: {amount}") from e

        quote = PriceQuote(
            base_symbol=base_symbol.upper(),
            quote_symbol=quote_symbol.upper(),
            price=price,
        )
        logger.debug(f"Fetched {pair} spot price: {price}")
        return self.validate_quote(quote)
