"""Input parsing helpers for creditcalc."""

from creditcalc.utils.date_parser import parse_date
from creditcalc.utils.amount_parser import parse_amount, parse_tax_rate

__all__ = ["parse_date", "parse_amount", "parse_tax_rate"]
