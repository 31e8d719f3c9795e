"""Ledger access: market account decoding and a Solana JSON-RPC client."""

from __future__ import annotations

import asyncio
import base64
import binascii
import itertools
import logging
import struct
from typing import Any, Protocol

import base58
import requests

from ..constants import (
    MARKET_BODY_PADDING,
    MARKET_BODY_SCALARS_SIZE,
    MARKET_HEADER_SIZE,
    TOKEN_ACCOUNT_AMOUNT_OFFSET,
)
from ..domain import MarketHeader, MarketMetadata, MarketState, TokenParams

logger = logging.getLogger(__name__)

_HEADER_LAYOUT = struct.Struct("<5Q2I32s32sQ2I32s32s2Q32s32sQ32s2I")
_BODY_LAYOUT = struct.Struct("<6Q")
_BODY_OFFSET = MARKET_HEADER_SIZE + MARKET_BODY_PADDING


class LedgerError(Exception):
    """Raised when market or token state cannot be read from the ledger."""


class MarketNotFoundError(LedgerError):
    """Raised when an account does not exist."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class MarketDecodeError(LedgerError):
    """Raised when account bytes do not match the expected layout."""


class LedgerClient(Protocol):
    async def get_market_metadata(self, market_id: str) -> MarketMetadata: ...

    async def get_raw_account_state(self, market_id: str) -> bytes: ...

    async def get_token_account_amount(self, account_id: str) -> int: ...


def encode_pubkey(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def _token_params(decimals: int, bump: int, mint: bytes, vault: bytes) -> TokenParams:
    return TokenParams(
        decimals=decimals,
        vault_bump=bump,
        mint_key=encode_pubkey(mint),
        vault_key=encode_pubkey(vault),
    )


def decode_market_header(data: bytes) -> MarketHeader:
    """Decode the fixed-size header at the start of a market account.

    Raises:
        MarketDecodeError: If the data is shorter than the header.
    """
    if len(data) < MARKET_HEADER_SIZE:
        raise MarketDecodeError(
            f"Market account too short for header: {len(data)} < {MARKET_HEADER_SIZE} bytes"
        )
    (
        discriminant,
        status,
        bids_size,
        asks_size,
        num_seats,
        base_decimals,
        base_bump,
        base_mint,
        base_vault,
        base_lot_size,
        quote_decimals,
        quote_bump,
        quote_mint,
        quote_vault,
        quote_lot_size,
        tick_size,
        authority,
        fee_recipient,
        market_sequence_number,
        successor,
        raw_base_units_per_base_unit,
        _padding,
    ) = _HEADER_LAYOUT.unpack_from(data, 0)

    return MarketHeader(
        discriminant=discriminant,
        status=status,
        bids_size=bids_size,
        asks_size=asks_size,
        num_seats=num_seats,
        base_params=_token_params(base_decimals, base_bump, base_mint, base_vault),
        base_lot_size=base_lot_size,
        quote_params=_token_params(quote_decimals, quote_bump, quote_mint, quote_vault),
        quote_lot_size=quote_lot_size,
        tick_size_in_quote_atoms_per_base_unit=tick_size,
        authority=encode_pubkey(authority),
        fee_recipient=encode_pubkey(fee_recipient),
        market_sequence_number=market_sequence_number,
        successor=encode_pubkey(successor),
        raw_base_units_per_base_unit=raw_base_units_per_base_unit,
    )


def decode_market_state(data: bytes) -> MarketState:
    """Decode the header and the fee counters of the market body.

    Raises:
        MarketDecodeError: If the data is too short for the market body.
    """
    header = decode_market_header(data)
    required = _BODY_OFFSET + MARKET_BODY_SCALARS_SIZE
    if len(data) < required:
        raise MarketDecodeError(
            f"Market account too short for market body: {len(data)} < {required} bytes"
        )
    (
        base_lots_per_base_unit,
        tick_size_in_quote_lots_per_base_unit,
        order_sequence_number,
        taker_fee_bps,
        collected_quote_lot_fees,
        unclaimed_quote_lot_fees,
    ) = _BODY_LAYOUT.unpack_from(data, _BODY_OFFSET)

    return MarketState(
        header=header,
        base_lots_per_base_unit=base_lots_per_base_unit,
        tick_size_in_quote_lots_per_base_unit=tick_size_in_quote_lots_per_base_unit,
        order_sequence_number=order_sequence_number,
        taker_fee_bps=taker_fee_bps,
        collected_quote_lot_fees=collected_quote_lot_fees,
        uncollected_quote_lot_fees=unclaimed_quote_lot_fees,
    )


def decode_uncollected_fee_lots(data: bytes) -> int:
    """Uncollected protocol fees of a market account, in quote lots."""
    return decode_market_state(data).uncollected_quote_lot_fees


def decode_token_account_amount(data: bytes) -> int:
    end = TOKEN_ACCOUNT_AMOUNT_OFFSET + 8
    if len(data) < end:
        raise MarketDecodeError(f"Token account too short: {len(data)} < {end} bytes")
    (amount,) = struct.unpack_from("<Q", data, TOKEN_ACCOUNT_AMOUNT_OFFSET)
    return amount


def _validate_pubkey(account_id: str) -> None:
    try:
        raw = base58.b58decode(account_id)
    except ValueError as e:
        raise LedgerError(f"Invalid account address {account_id!r}: {e}") from e
    if len(raw) != 32:
        raise LedgerError(
            f"Invalid account address {account_id!r}: expected 32 bytes, got {len(raw)}"
        )


class SolanaRpcLedgerClient:
    """Reads account data through the Solana JSON-RPC API.

    Every call is a single blocking HTTP request run in a worker thread.
    Nothing is cached between calls.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("RPC %s %s", method, params[:1])
        try:
            response = self._session.post(
                self.rpc_url, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            raise LedgerError(f"RPC request {method} failed: {e}") from e
        except ValueError as e:
            raise LedgerError(f"Invalid JSON from RPC for {method}") from e

        if not isinstance(body, dict):
            raise LedgerError(f"Invalid RPC response structure: {body!r}")
        if body.get("error"):
            raise LedgerError(f"RPC error for {method}: {body['error']}")
        return body.get("result")

    def _fetch_account_data(self, account_id: str) -> bytes:
        _validate_pubkey(account_id)
        result = self._call(
            "getAccountInfo",
            [account_id, {"encoding": "base64", "commitment": "confirmed"}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            raise MarketNotFoundError(account_id)

        data = value.get("data")
        if not isinstance(data, list) or len(data) != 2 or data[1] != "base64":
            raise MarketDecodeError(f"Unexpected account data encoding for {account_id}")
        try:
            return base64.b64decode(data[0], validate=True)
        except (binascii.Error, TypeError) as e:
            raise MarketDecodeError(f"Invalid base64 account data for {account_id}") from e

    async def get_raw_account_state(self, market_id: str) -> bytes:
        return await asyncio.to_thread(self._fetch_account_data, market_id)

    async def get_market_metadata(self, market_id: str) -> MarketMetadata:
        data = await self.get_raw_account_state(market_id)
        return decode_market_header(data).metadata()

    async def get_market_state(self, market_id: str) -> MarketState:
        data = await self.get_raw_account_state(market_id)
        return decode_market_state(data)

    async def get_token_account_amount(self, account_id: str) -> int:
        data = await asyncio.to_thread(self._fetch_account_data, account_id)
        return decode_token_account_amount(data)
