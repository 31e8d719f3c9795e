from __future__ import annotations

from decimal import Decimal, InvalidOperation

MAX_DECIMALS = 19
U64_MAX = 2**64 - 1


class UnitConversionError(ValueError):
    """Base class for unit conversion failures."""


class InvalidScale(UnitConversionError):
    """Raised when a decimal count is outside the supported range."""

    def __init__(self, decimals: int):
        self.decimals = decimals
        super().__init__(
            f"Unsupported decimal scale {decimals}; expected 0..{MAX_DECIMALS}"
        )


class ArithmeticOverflow(UnitConversionError):
    """Raised when a scaled quantity no longer fits in an unsigned 64-bit value."""

    def __init__(self, lots: int, lot_size: int):
        self.lots = lots
        self.lot_size = lot_size
        super().__init__(f"{lots} lots x lot size {lot_size} overflows u64")


def _check_scale(decimals: int) -> None:
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidScale(decimals)


def _check_raw(raw: int, name: str = "raw") -> None:
    if raw < 0:
        raise ValueError(f"{name} quantity must be non-negative, got {raw}")


def to_decimal_string(raw: int, decimals: int) -> str:
    """Render an atom count as a fixed-point decimal string.

    The split between integer and fractional digits is done on the digit
    string, so no precision is lost for large balances. Every fractional
    digit is kept, which makes the output parse back to ``raw`` exactly.

    Args:
        raw: Non-negative quantity in the smallest on-chain unit.
        decimals: Number of decimal places of the token.

    Returns:
        ``raw / 10**decimals`` as a string, e.g. ``to_decimal_string(5, 3) == "0.005"``.

    Raises:
        InvalidScale: If ``decimals`` is outside ``[0, 19]``.
        ValueError: If ``raw`` is negative.
    """
    _check_scale(decimals)
    _check_raw(raw)
    digits = str(raw)
    if decimals == 0:
        return digits
    if len(digits) <= decimals:
        digits = "0" * (decimals + 1 - len(digits)) + digits
    return f"{digits[:-decimals]}.{digits[-decimals:]}"


def from_decimal_string(text: str, decimals: int) -> int:
    """Parse a decimal string back into an atom count.

    Raises:
        InvalidScale: If ``decimals`` is outside ``[0, 19]``.
        ValueError: If the text is not a non-negative decimal representable
            with ``decimals`` fractional digits.
    """
    _check_scale(decimals)
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal string: {text!r}") from e
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid decimal string: {text!r}")

    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{text!r} has more than {decimals} fractional digits")
    return int(scaled)


def to_decimal(raw: int, decimals: int) -> Decimal:
    """Exact Decimal value of ``raw / 10**decimals``."""
    return Decimal(to_decimal_string(raw, decimals))


def lots_to_amount(lots: int, lot_size: int) -> int:
    """Convert a lot count into atoms.

    Raises:
        ArithmeticOverflow: If the product exceeds the u64 range.
    """
    _check_raw(lots, "lot")
    _check_raw(lot_size, "lot size")
    amount = lots * lot_size
    if amount > U64_MAX:
        raise ArithmeticOverflow(lots, lot_size)
    return amount


def ticks_to_price(
    ticks: int,
    tick_size_in_quote_atoms_per_base_unit: int,
    quote_decimals: int,
    raw_base_units_per_base_unit: int = 1,
) -> float:
    """Convert a price in ticks to quote units per base unit.

    The scaling happens on Decimal values and is only turned into a float at
    the end, so a larger tick count never yields a smaller price.
    """
    _check_scale(quote_decimals)
    _check_raw(ticks, "tick")
    if raw_base_units_per_base_unit <= 0:
        raise ValueError(
            f"raw_base_units_per_base_unit must be positive, got {raw_base_units_per_base_unit}"
        )
    quote_atoms = Decimal(ticks) * Decimal(tick_size_in_quote_atoms_per_base_unit)
    price = quote_atoms.scaleb(-quote_decimals) / Decimal(raw_base_units_per_base_unit)
    return float(price)


def quote_atoms_to_float(atoms: int, quote_decimals: int) -> float:
    return float(to_decimal(atoms, quote_decimals))
