"""Fixed-precision money helpers.

All cash amounts and prices are `Decimal` values with two fraction digits.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a number to cents.

    Floats are converted through `str` so that values read back from
    SQLite (which stores NUMERIC as REAL) do not carry binary noise.
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    """Format an amount as US dollars, e.g. ``$2,680.00`` or ``-$15.50``."""
    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percent(value: Decimal) -> str:
    """Format a percentage with an explicit sign, e.g. ``+4.25%``."""
    amount = to_money(value)
    sign = "+" if amount > 0 else ""
    return f"{sign}{amount:.2f}%"
