"""Runtime configuration."""

import os
from decimal import Decimal
from typing import Optional

from creditcalc.utils.amount_parser import parse_tax_rate

TAX_RATE_ENV_VAR = "CREDITCALC_TAX_RATE"
DEFAULT_TAX_RATE = Decimal("13.0")


def resolve_tax_rate(tax_rate: Optional[str] = None) -> Decimal:
    """Resolve the tax rate for a calculation run.

    Args:
        tax_rate: Explicit tax rate. If None, checks CREDITCALC_TAX_RATE
            environment variable, then defaults to 13.0

    Returns:
        Tax rate percentage

    Raises:
        ValueError: If the configured value is not a valid percentage
    """
    if tax_rate is None:
        tax_rate = os.environ.get(TAX_RATE_ENV_VAR)

    if tax_rate is None:
        return DEFAULT_TAX_RATE

    return parse_tax_rate(tax_rate)
