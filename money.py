"""Fixed-point currency and rate arithmetic.

Money is an ``int`` count of minor units (cents) and rates are an ``int`` count
of basis points. Every rounding step rounds half away from zero so that results
are reproducible bit-for-bit.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from constants import (
    BASIS_POINTS_PER_PERCENT,
    BASIS_POINTS_PER_UNIT,
    DEFAULT_CURRENCY_SYMBOL,
    MINOR_UNITS_PER_UNIT,
)
from errors import InvalidAmount, InvalidRate

Money = int
Rate = int
DecimalLike = Union[str, int, float, Decimal]

_HUNDREDTHS = Decimal("0.01")
_MONEY_PATTERN = re.compile(
    r"^(?P<sign>-)?(?P<number>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d*)?|\.\d+)$"
)


def _to_decimal(value: DecimalLike) -> Decimal:
    """Converts ``value`` to a finite Decimal, raising ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{value!r} is not finite")
        # str() keeps the shortest round-tripping repr, e.g. 0.1 -> "0.1"
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"{value!r} is not a decimal number") from e
    else:
        raise ValueError(f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"{value!r} is not finite")
    return result


def _hundredths(value: Decimal) -> int:
    """Rounds to two decimal places (half away from zero) and scales by 100."""
    return int(value.quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP) * 100)


def _round_div(numerator: int, denominator: int) -> int:
    """Integer division rounding to nearest, ties away from zero."""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return quotient if numerator >= 0 else -quotient


def to_minor_units(amount: DecimalLike, allow_negative: bool = False) -> Money:
    """Converts a decimal currency amount to integer minor units."""
    try:
        value = _to_decimal(amount)
        minor = _hundredths(value)
    except (ValueError, InvalidOperation) as e:
        raise InvalidAmount(f"Invalid amount {amount!r}: {e}") from e

    if value < 0 and not allow_negative:
        raise InvalidAmount(f"Amount must not be negative, got {amount!r}")
    return minor


def parse_money(
    text: str, symbol: str = DEFAULT_CURRENCY_SYMBOL, allow_negative: bool = False
) -> Money:
    """
    Parses user-typed money such as ``$10,000.00``, ``500`` or ``-$12.5``.

    ``.`` is the only decimal separator and ``,`` is only accepted as a
    thousands separator in its proper positions. No locale is consulted.
    """
    cleaned = text.strip().replace(" ", "")
    sign = ""
    if cleaned.startswith("-"):
        sign, cleaned = "-", cleaned[1:]
    if symbol and cleaned.startswith(symbol):
        cleaned = cleaned[len(symbol):]

    match = _MONEY_PATTERN.match(sign + cleaned)
    if match is None:
        raise InvalidAmount(f"Cannot parse {text!r} as a currency amount")

    number = match.group("number").replace(",", "")
    return to_minor_units(sign + number, allow_negative=allow_negative)


def to_basis_points(percent: DecimalLike) -> Rate:
    """Converts a percentage (e.g. ``7.5`` or ``"7.5%"``) to basis points."""
    if isinstance(percent, str):
        percent = percent.strip().rstrip("%")
    try:
        return _hundredths(_to_decimal(percent))
    except (ValueError, InvalidOperation) as e:
        raise InvalidRate(f"Invalid rate {percent!r}: {e}") from e


def apply_growth(balance: Money, rate: Rate) -> Money:
    """Returns ``balance`` grown by ``rate`` basis points, rounded to a minor unit."""
    return _round_div(balance * (BASIS_POINTS_PER_UNIT + rate), BASIS_POINTS_PER_UNIT)


def apply_tax(amount: Money, rate: Rate) -> Money:
    """Returns the tax owed on ``amount`` at ``rate`` basis points."""
    return _round_div(amount * rate, BASIS_POINTS_PER_UNIT)


def format_minor_units(amount: Money) -> str:
    """Machine-readable rendering: two fractional digits, ``.`` separator."""
    sign = "-" if amount < 0 else ""
    units, cents = divmod(abs(amount), MINOR_UNITS_PER_UNIT)
    return f"{sign}{units}.{cents:02d}"


def format_currency(amount: Money, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    sign = "-" if amount < 0 else ""
    units, cents = divmod(abs(amount), MINOR_UNITS_PER_UNIT)
    return f"{sign}{symbol}{units:,}.{cents:02d}"


def format_basis_points(rate: Rate) -> str:
    sign = "-" if rate < 0 else ""
    whole, frac = divmod(abs(rate), BASIS_POINTS_PER_PERCENT)
    return f"{sign}{whole}.{frac:02d}%"
