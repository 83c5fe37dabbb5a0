"""Domain layer for creditcalc."""

from creditcalc.domain.credit import CreditCalculationService
from creditcalc.domain.errors import DomainError, ValidationError, InvalidRangeError

__all__ = [
    "CreditCalculationService",
    "DomainError",
    "ValidationError",
    "InvalidRangeError",
]
