"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "79.99"
    - "$79.99"
    - "1,234.56"
    - "(79.99)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_tax_rate(rate_str: str) -> Decimal:
    """Parse a tax percentage such as "13", "13.0" or "13%".

    Raises:
        ValueError: If the rate cannot be parsed or is outside 0-100
    """
    if rate_str is None or not str(rate_str).strip():
        raise ValueError("Empty tax rate")

    cleaned = str(rate_str).strip().rstrip("%").strip()
    try:
        rate = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse tax rate '{rate_str}'") from e

    if not rate.is_finite() or rate < 0 or rate > 100:
        raise ValueError(f"Tax rate must be between 0 and 100, got '{rate_str}'")
    return rate
