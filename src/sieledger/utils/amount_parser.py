"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

TWO_PLACES = Decimal("0.01")
# Numeric(14, 2) columns hold at most 12 integer digits
MAX_AMOUNT = Decimal("1e12")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles the formats found in SIE files and Swedish exports:
    - "123.45"
    - "-10000.00"
    - "1 234,56" (space grouping, comma decimals)
    - "123,45 kr"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip().strip('"')
    amount_str = re.sub(r"(?i)\s*(kr|sek)$", "", amount_str)
    amount_str = re.sub(r"\s", "", amount_str)

    # Comma is the decimal separator when there is no dot
    if "," in amount_str and "." not in amount_str:
        amount_str = amount_str.replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
        if not amount.is_finite():
            raise ValueError(f"Could not parse amount '{amount_str}'")
        amount = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if abs(amount) >= MAX_AMOUNT:
        raise ValueError(f"Amount out of range '{amount_str}'")
    return amount


def format_sie_amount(amount: Decimal) -> str:
    """Format an amount for SIE: two decimals, dot separator, no grouping."""
    return str(Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_sek(amount: Decimal) -> str:
    """Format an amount for display, e.g. ``-10 000,00 kr``."""
    quantized = Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    grouped = f"{abs(quantized):,.2f}".replace(",", " ").replace(".", ",")
    sign = "-" if quantized < 0 else ""
    return f"{sign}{grouped} kr"
