"""
Form input parsing for subscription costs
"""
import re
from decimal import Decimal, InvalidOperation

# Digits with an optional fraction; no sign, no exponent
_AMOUNT_RE = re.compile(r"^\d+(?:\.(\d+))?$")


def parse_amount(value: str | None, max_decimal_places: int = 2) -> Decimal:
    """
    Parse a non-negative money amount typed into a form.

    A comma is accepted as the decimal separator and surrounding spaces are
    ignored.

    Args:
        value: raw form value ("9,99", " 12 ", "0.5")
        max_decimal_places: digits allowed after the separator

    Returns:
        Decimal amount

    Raises:
        ValueError: empty, negative, not a number or too many decimal places

    Example:
        >>> parse_amount("9,99")
        Decimal('9.99')
        >>> parse_amount("-1")
        ValueError: Amount cannot be negative
    """
    normalized = (value or "").strip().replace(",", ".")
    if not normalized:
        raise ValueError("Amount is required")
    if normalized.startswith("-"):
        raise ValueError("Amount cannot be negative")

    match = _AMOUNT_RE.match(normalized)
    if not match:
        raise ValueError("Invalid amount")
    fraction = match.group(1)
    if fraction is not None and len(fraction) > max_decimal_places:
        raise ValueError(f"At most {max_decimal_places} decimal places")

    try:
        return Decimal(normalized)
    except InvalidOperation as e:
        raise ValueError("Invalid amount") from e
