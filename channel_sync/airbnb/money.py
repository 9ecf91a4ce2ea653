"""Exact conversion of decimal prices to integer minor currency units."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

DEFAULT_MINOR_UNIT_EXPONENT = 2

# ISO 4217 currencies whose minor unit is not 1/100.
MINOR_UNIT_EXPONENTS: dict[str, int] = {
    "BIF": 0,
    "CLP": 0,
    "DJF": 0,
    "GNF": 0,
    "ISK": 0,
    "JPY": 0,
    "KMF": 0,
    "KRW": 0,
    "PYG": 0,
    "RWF": 0,
    "UGX": 0,
    "VND": 0,
    "VUV": 0,
    "XAF": 0,
    "XOF": 0,
    "XPF": 0,
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
}

Amount = Union[Decimal, int, float, str]


def minor_unit_exponent(currency: Optional[str]) -> int:
    if not currency:
        return DEFAULT_MINOR_UNIT_EXPONENT
    return MINOR_UNIT_EXPONENTS.get(currency.upper(), DEFAULT_MINOR_UNIT_EXPONENT)


def to_minor_units(amount: Amount, currency: Optional[str] = None) -> int:
    """
    Convert a major-unit amount to integer minor units, rounding half up.

    Floats go through ``str`` first so that 19.995 is treated as the decimal
    19.995 and not as its binary approximation.

    Args:
        amount: Price in major units (e.g. 120.5 USD).
        currency: ISO 4217 code; two decimals when unknown or absent.

    Returns:
        int: Amount in minor units (e.g. 12050).

    Example:
        >>> to_minor_units("10.005")
        1001
        >>> to_minor_units(1500, "JPY")
        1500
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    scaled = value.scaleb(minor_unit_exponent(currency))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
