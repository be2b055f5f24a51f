"""
Monetary helpers for bill arithmetic.

Key Principles:
1. NEVER use float for money
2. Bill components (tax, service charge, percentage discounts) are rounded
   to whole currency units with ROUND_HALF_UP, the rounding printed bills
   have always used
3. Stored amounts keep the currency's minor-unit precision
"""

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP, getcontext
from typing import Union

# Set high precision for intermediate calculations
getcontext().prec = 28

Number = Union[Decimal, str, int, float]

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "INR": 2,  # Indian Rupee (paise)
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "AED": 2,
    "JPY": 0,
}

CURRENCY_SYMBOL = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

ZERO = Decimal("0")
WHOLE_UNIT = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """
    Convert any numeric input to Decimal without float artefacts.

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal("250.50")
        Decimal('250.50')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Convert float to string first to avoid precision issues
        value = str(value)
    return Decimal(value)


def round_half_up(value: Number) -> Decimal:
    """
    Round to whole currency units, halves away from zero.

    Examples:
        >>> round_half_up("12.5")
        Decimal('13')
        >>> round_half_up("12.49")
        Decimal('12')
    """
    return to_decimal(value).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def ceil_units(value: Number) -> Decimal:
    """
    Round up to the next whole currency unit.

    Examples:
        >>> ceil_units("333.34")
        Decimal('334')
    """
    return to_decimal(value).quantize(WHOLE_UNIT, rounding=ROUND_CEILING)


def percent_of(amount: Number, rate: Number) -> Decimal:
    """Unrounded `rate` percent of `amount`."""
    return to_decimal(amount) * to_decimal(rate) / Decimal("100")


def quantize(currency: str, amount: Number) -> Decimal:
    """
    Round to the currency's minor unit (paise for INR).

    Examples:
        >>> quantize("INR", "10.125")
        Decimal('10.13')
        >>> quantize("JPY", "1234.5")
        Decimal('1235')
    """
    exponent = CURRENCY_EXPONENT.get(currency.upper(), 2)
    return to_decimal(amount).quantize(Decimal(10) ** -exponent, rounding=ROUND_HALF_UP)


def format_money(amount: Number, currency: str = "INR") -> str:
    """
    Format an amount the way it appears on a bill.

    Whole amounts drop their decimals.

    Examples:
        >>> format_money(Decimal("400.00"))
        '₹400'
        >>> format_money(Decimal("99.5"))
        '₹99.50'
    """
    amount = to_decimal(amount)
    symbol = CURRENCY_SYMBOL.get(currency.upper(), f"{currency.upper()} ")
    if amount == amount.to_integral_value():
        return f"{symbol}{int(amount)}"
    return f"{symbol}{quantize(currency, amount)}"
