"""Shared domain error messages and error types."""

from typing import Optional

from creditcalc.domain.entities import ValidationIssue


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid or missing calculation input.

    Every offending item and field is collected in ``issues`` so callers can
    report all problems at once instead of one per attempt.
    """

    def __init__(self, issues: list[ValidationIssue] | tuple[ValidationIssue, ...]):
        self.issues = tuple(issues)
        super().__init__("; ".join(issue.message for issue in self.issues))


class InvalidRangeError(DomainError):
    """A date range ends before it starts."""


def missing_field(item_name: Optional[str], field: str) -> str:
    """Return message for a missing required service field."""
    return f"Missing {field} for service: {item_name or 'Unnamed Service'}"


def non_positive_price(item_name: Optional[str]) -> str:
    """Return message for a price that is zero or negative."""
    return f"Price paid must be greater than zero for service: {item_name or 'Unnamed Service'}"


def billing_end_not_after_start(item_name: Optional[str]) -> str:
    """Return message for an empty or inverted billing period."""
    return f"Invoice end date must be after start date for service: {item_name or 'Unnamed Service'}"


def service_start_before_billing(item_name: Optional[str]) -> str:
    """Return message for a service start preceding the billing period."""
    return (
        f"Service start date for {item_name or 'Unnamed Service'} "
        "cannot be before its invoice start date"
    )


def service_start_after_billing(item_name: Optional[str]) -> str:
    """Return message for a service start following the billing period."""
    return (
        f"Service start date for {item_name or 'Unnamed Service'} "
        "cannot be after its invoice end date"
    )


def tax_rate_out_of_range(tax_rate) -> str:
    """Return message for a tax rate outside 0-100."""
    return f"Tax rate must be between 0 and 100 percent, got {tax_rate}"


def no_services() -> str:
    """Return message when a calculation is requested with no services."""
    return "At least one service is required to calculate credits"


def invoice_mismatch(request_invoice_id: str, invoice_id: str) -> str:
    """Return message when a credit request targets a different invoice."""
    return f"Credit request is for invoice '{request_invoice_id}', not '{invoice_id}'"


def inverted_range(start, end) -> str:
    """Return message for a date range whose end precedes its start."""
    return f"End date {end} is before start date {start}"


def non_positive_unit_price(item_id: str) -> str:
    """Return message for an invoice unit price that is zero or negative."""
    return f"Unit price must be greater than zero for invoice item: {item_id}"


def non_positive_quantity(item_id: str) -> str:
    """Return message for an invoice quantity that is zero or negative."""
    return f"Quantity must be greater than zero for invoice item: {item_id}"


def missing_item_field(item_id: str, field: str) -> str:
    """Return message for a missing invoice item field."""
    return f"Missing {field} for invoice item: {item_id}"


def item_service_end_before_start(item_id: str) -> str:
    """Return message for an invoice item whose service period is inverted."""
    return f"Service end date must not be before start date for invoice item: {item_id}"
