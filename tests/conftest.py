from __future__ import annotations

import struct

import base58
import pytest

from clob_report.constants import USDC_MINT, WSOL_MINT
from clob_report.domain import MarketMetadata


def pubkey_bytes(seed: int) -> bytes:
    return bytes([seed]) * 32


def pubkey(seed: int) -> str:
    return base58.b58encode(pubkey_bytes(seed)).decode("ascii")


def build_market_account(
    *,
    base_mint: str = WSOL_MINT,
    quote_mint: str = USDC_MINT,
    base_decimals: int = 9,
    quote_decimals: int = 6,
    base_lot_size: int = 1_000_000,
    quote_lot_size: int = 1,
    tick_size: int = 1_000,
    raw_base_units_per_base_unit: int = 1,
    taker_fee_bps: int = 2,
    collected_fee_lots: int = 0,
    uncollected_fee_lots: int = 0,
    trailing: int = 64,
) -> bytes:
    header = struct.pack(
        "<5Q2I32s32sQ2I32s32s2Q32s32sQ32s2I",
        8167313896524341111,  # discriminant
        1,  # status
        4096,
        4096,
        8193,
        base_decimals,
        255,
        base58.b58decode(base_mint),
        pubkey_bytes(11),  # base vault
        base_lot_size,
        quote_decimals,
        254,
        base58.b58decode(quote_mint),
        pubkey_bytes(12),  # quote vault
        quote_lot_size,
        tick_size,
        pubkey_bytes(13),  # authority
        pubkey_bytes(14),  # fee recipient
        42,
        pubkey_bytes(0),  # successor
        raw_base_units_per_base_unit,
        0,
    )
    header += b"\x00" * 256
    assert len(header) == 576

    body = b"\x00" * 256 + struct.pack(
        "<6Q",
        10**base_decimals // base_lot_size,
        tick_size // quote_lot_size,
        99,
        taker_fee_bps,
        collected_fee_lots,
        uncollected_fee_lots,
    )
    return header + body + b"\x00" * trailing


def build_token_account(amount: int) -> bytes:
    return pubkey_bytes(1) + pubkey_bytes(2) + struct.pack("<Q", amount) + b"\x00" * 93


@pytest.fixture
def make_market_account():
    return build_market_account


@pytest.fixture
def make_token_account():
    return build_token_account


@pytest.fixture
def make_pubkey():
    return pubkey


@pytest.fixture
def sol_usdc():
    """SOL/USDC: 0.001 SOL base lots, 0.001 USDC ticks."""
    return MarketMetadata(
        base_mint=WSOL_MINT,
        quote_mint=USDC_MINT,
        base_decimals=9,
        quote_decimals=6,
        base_lot_size=1_000_000,
        quote_lot_size=1,
        tick_size_in_quote_atoms_per_base_unit=1_000,
    )
