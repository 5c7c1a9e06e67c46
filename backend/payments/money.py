"""
Monetary precision helpers.

Money never touches binary floats: amounts are Decimals rounded to the
currency's minor unit at every accumulation step, and cross the payment
processor boundary as integers in minor units (cents).

Rounding is ROUND_HALF_UP (half away from zero for positive amounts), so
0.125 -> 0.13. Every price, line total, subtotal, tax and total in the order
pipeline goes through :func:`quantize`.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

DEFAULT_CURRENCY = "USD"

# Minor unit exponents for the currencies we can be configured with.
CURRENCY_EXPONENT = {
    "USD": 2,
    "CAD": 2,
    "EUR": 2,
    "GBP": 2,
    "JPY": 0,
}

Number = Union[Decimal, str, int, float]


def currency_exponent(currency: str = DEFAULT_CURRENCY) -> int:
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def minor_unit(currency: str = DEFAULT_CURRENCY) -> Decimal:
    """Smallest representable amount, e.g. Decimal('0.01') for USD."""
    return Decimal(10) ** -currency_exponent(currency)


def to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # repr of a float is the shortest round-tripping string
        amount = repr(amount)
    return Decimal(amount)


def quantize(amount: Number, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
    Round to the currency's minor unit.

    Examples:
        >>> quantize(Decimal("1.2319"))
        Decimal('1.23')
        >>> quantize("0.125")
        Decimal('0.13')
    """
    return to_decimal(amount).quantize(minor_unit(currency), rounding=ROUND_HALF_UP)


def to_minor(amount: Number, currency: str = DEFAULT_CURRENCY) -> int:
    """
    Convert to integer minor units after quantization.

    Examples:
        >>> to_minor("20.63")
        2063
        >>> to_minor("10.125")
        1013
    """
    quantized = quantize(amount, currency)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(minor: int, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
    Convert integer minor units back to a Decimal amount.

    Examples:
        >>> from_minor(2063)
        Decimal('20.63')
    """
    return quantize(Decimal(minor) / (10 ** currency_exponent(currency)), currency)
