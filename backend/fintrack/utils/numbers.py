"""Lenient numeric coercion shared by the calculator and the CSV parsers."""

from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any
import re
import unicodedata

ZERO = Decimal("0")

# Magnitudes outside 1e-30 .. 1e30 are never real prices or share counts and
# would overflow the decimal context once multiplied
MAX_ADJUSTED_EXPONENT = 30

# Leading numeric prefix, the way a browser's parseFloat reads "600元" as 600
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def clean_number(value: Any) -> Decimal:
    """
    Parse a broker-formatted number.

    Full-width characters are folded to ASCII (NFKC), quote characters and
    thousands separators are removed, and the leading numeric part is parsed.
    Anything unparsable becomes zero.

    Examples:
        >>> clean_number('"-600,020"')
        Decimal('-600020')
        >>> clean_number("１，０００")
        Decimal('1000')
        >>> clean_number("n/a")
        Decimal('0')
    """
    if value is None:
        return ZERO

    text = unicodedata.normalize("NFKC", str(value))
    text = text.replace('"', "").replace(",", "").strip()

    match = _NUMBER_PREFIX.match(text)
    if not match:
        return ZERO

    try:
        number = Decimal(match.group(0))
    except InvalidOperation:
        return ZERO

    return _bounded(number)


def _bounded(number: Decimal) -> Decimal:
    if not number.is_finite() or abs(number.adjusted()) > MAX_ADJUSTED_EXPONENT:
        return ZERO
    return number


def to_decimal(value: Any) -> Decimal:
    """
    Coerce any value to a finite Decimal, treating non-numeric input as zero.

    Booleans, None, NaN, infinities and absurd magnitudes all map to zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        return _bounded(value)

    if isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return ZERO
        return _bounded(number)

    if isinstance(value, str):
        return clean_number(value)

    return ZERO


def floor_decimal(value: Decimal) -> Decimal:
    """Round down to a whole currency unit."""
    return value.to_integral_value(rounding=ROUND_FLOOR)


def safe_percentage(numerator: Decimal, denominator: Decimal) -> float:
    """
    Calculate numerator / denominator * 100, or 0.0 when the denominator is not positive.
    """
    if denominator is None or denominator <= 0:
        return 0.0

    return float(numerator / denominator * 100)
