"""
Unified money formatting for templates and the JSON API.

Usage:
    from app.utils.money import format_money

    format_money(9.99, "USD")      -> "$9.99"
    format_money(1200.5, "EUR")    -> "1,200.50 EUR"
"""
from decimal import Decimal

# Prefix symbol for known currencies, ISO code suffix for the rest
_CURRENCY_PREFIX = {
    "USD": "$",
}


def format_money(amount, currency: str = "USD", decimals: int = 2) -> str:
    """
    Format an amount with thousands separators and a currency marker.

    Args:
        amount: int / float / Decimal / str
        currency: ISO currency code
        decimals: digits after the decimal point
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    formatted = f"{{:,.{decimals}f}}".format(amount)
    prefix = _CURRENCY_PREFIX.get(currency)
    if prefix:
        return f"{prefix}{formatted}"
    return f"{formatted} {currency}"
