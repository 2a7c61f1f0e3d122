"""
User-supplied numeric input and unit scaling.

All scaling is exact: values are parsed as ``Decimal`` and converted to
integers in the smallest unit, never through floats.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from .errors import ValidationError

ETHER = 10**18

# ERC-20 decimals are a uint8.
MAX_DECIMALS = 255

UINT256_LIMIT = 2**256


def parse_positive_number(value: Union[str, int, Decimal], label: str) -> Decimal:
    """
    Parse a finite, strictly positive number.

    Raises:
        ValidationError: If ``value`` is empty, not numeric, infinite, NaN or <= 0
    """
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{label} must be a valid number.")
    try:
        number = Decimal(text)
    except ArithmeticError:
        raise ValidationError(f"{label} must be a valid number.") from None
    if not number.is_finite() or number <= 0:
        raise ValidationError(f"{label} must be a valid number greater than 0.")
    return number


def parse_decimals(value: Union[str, int]) -> int:
    """Parse a token's decimals: a positive integer that fits in a uint8."""
    number = parse_positive_number(value, "Decimals")
    if number > MAX_DECIMALS:
        raise ValidationError(f"Decimals must be at most {MAX_DECIMALS}.")
    if number != number.to_integral_value():
        raise ValidationError("Decimals must be a whole number.")
    return int(number)


def parse_units(value: Union[str, Decimal], decimals: int, label: str = "Amount") -> int:
    """
    Scale a human amount to the smallest unit: ``value * 10**decimals``.

    The integer is built from the decimal digits directly, so no decimal
    context precision applies and nothing is ever rounded.

    Raises:
        ValidationError: If the amount is not positive, does not fit in a
            uint256 once scaled, or has more fractional digits than
            ``decimals`` allows
    """
    number = parse_positive_number(value, label)
    # Most significant digit at 10**78 or above cannot fit in 2**256 - 1.
    if number.adjusted() + decimals >= 78:
        raise ValidationError(f"{label} {value} is too large.")

    _, digits, exponent = number.as_tuple()
    coefficient = int("".join(map(str, digits)))
    shift = exponent + decimals
    if shift >= 0:
        scaled = coefficient * 10**shift
    elif -shift > len(digits):
        raise ValidationError(f"{label} {value} has more than {decimals} decimal places.")
    else:
        scaled, remainder = divmod(coefficient, 10**-shift)
        if remainder:
            raise ValidationError(f"{label} {value} has more than {decimals} decimal places.")

    if scaled >= UINT256_LIMIT:
        raise ValidationError(f"{label} {value} is too large.")
    return scaled


def format_units(amount: int, decimals: int) -> str:
    """Render a smallest-unit integer as a plain decimal string."""
    whole, fraction = divmod(amount, 10**decimals)
    if not fraction:
        return str(whole)
    return f"{whole}.{str(fraction).zfill(decimals).rstrip('0')}"
