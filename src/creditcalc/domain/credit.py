"""Credit calculation domain service."""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence

from creditcalc.domain import errors
from creditcalc.domain.day_span import days_between, normalize_date
from creditcalc.domain.entities import (
    AggregatedCreditResult,
    CreditCalculation,
    CreditRequest,
    Invoice,
    InvoiceCreditResult,
    InvoiceItem,
    InvoiceItemCredit,
    ServiceItem,
    ValidationIssue,
)
from creditcalc.domain.proration import (
    calculate_tax,
    daily_rate,
    full_credit,
    outage_credit,
    partial_period_credit,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value) -> Decimal:
    """Coerce an int, float, string or Decimal to Decimal.

    Raises:
        ValueError: If value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a numeric amount: {value!r}") from e


def validate_tax_rate(tax_rate) -> Decimal:
    """Return tax_rate as Decimal, rejecting values outside 0-100.

    Raises:
        ValidationError: If tax_rate is missing, not numeric or out of range
    """
    try:
        rate = to_decimal(tax_rate) if tax_rate is not None else None
    except ValueError:
        rate = None
    if rate is None or not rate.is_finite() or rate < 0 or rate > 100:
        raise errors.ValidationError(
            [
                ValidationIssue(
                    index=None,
                    item_name=None,
                    field="tax_rate",
                    message=errors.tax_rate_out_of_range(tax_rate),
                )
            ]
        )
    return rate


def _check_service_item(index: int, item: ServiceItem) -> list[ValidationIssue]:
    """Run every check against one item; return the failures."""
    issues: list[ValidationIssue] = []

    def fail(field: str, message: str) -> None:
        issues.append(ValidationIssue(index, item.name, field, message))

    if not item.name:
        fail("name", errors.missing_field(item.name, "name"))

    if item.price_paid is None:
        fail("price_paid", errors.missing_field(item.name, "price paid"))
    else:
        try:
            price = to_decimal(item.price_paid)
        except ValueError:
            price = None
        if price is None or not price.is_finite() or price <= 0:
            fail("price_paid", errors.non_positive_price(item.name))

    period = item.billing_period
    start = period.start if period is not None else None
    end = period.end if period is not None else None
    if start is None:
        fail("billing_period.start", errors.missing_field(item.name, "invoice start date"))
    if end is None:
        fail("billing_period.end", errors.missing_field(item.name, "invoice end date"))
    if item.actual_service_start_date is None:
        fail(
            "actual_service_start_date",
            errors.missing_field(item.name, "actual service start date"),
        )

    if start is not None and end is not None:
        start = normalize_date(start)
        end = normalize_date(end)
        if end <= start:
            fail("billing_period", errors.billing_end_not_after_start(item.name))
        elif item.actual_service_start_date is not None:
            service_start = normalize_date(item.actual_service_start_date)
            if service_start < start:
                fail(
                    "actual_service_start_date",
                    errors.service_start_before_billing(item.name),
                )
            elif service_start > end:
                fail(
                    "actual_service_start_date",
                    errors.service_start_after_billing(item.name),
                )

    return issues


def validate_service_items(items: Sequence[ServiceItem]) -> None:
    """Validate outage-credit input.

    Raises:
        ValidationError: Listing every offending item and field, in input order
    """
    if not items:
        raise errors.ValidationError(
            [ValidationIssue(None, None, "items", errors.no_services())]
        )

    issues: list[ValidationIssue] = []
    for index, item in enumerate(items):
        issues.extend(_check_service_item(index, item))
    if issues:
        raise errors.ValidationError(issues)


def _check_invoice_item(index: int, item: InvoiceItem) -> list[ValidationIssue]:
    """Run every check against one invoice item; return the failures."""
    issues: list[ValidationIssue] = []

    def fail(field: str, message: str) -> None:
        issues.append(ValidationIssue(index, item.id, field, message))

    if item.unit_price is None:
        fail("unit_price", errors.missing_item_field(item.id, "unit price"))
    else:
        try:
            price = to_decimal(item.unit_price)
        except ValueError:
            price = None
        if price is None or not price.is_finite() or price <= 0:
            fail("unit_price", errors.non_positive_unit_price(item.id))

    if item.quantity is None or item.quantity <= 0:
        fail("quantity", errors.non_positive_quantity(item.id))

    if item.service_start_date is None:
        fail("service_start_date", errors.missing_item_field(item.id, "service start date"))
    if item.service_end_date is None:
        fail("service_end_date", errors.missing_item_field(item.id, "service end date"))
    if (
        item.service_start_date is not None
        and item.service_end_date is not None
        and normalize_date(item.service_end_date) < normalize_date(item.service_start_date)
    ):
        fail("service_end_date", errors.item_service_end_before_start(item.id))

    return issues


def validate_invoice_items(invoice: Invoice, item_ids: Sequence[str]) -> None:
    """Validate the invoice items a credit request names.

    IDs not on the invoice are ignored here; the calculation skips them.

    Raises:
        ValidationError: Listing every offending item and field, in request order
    """
    issues: list[ValidationIssue] = []
    for index, item_id in enumerate(item_ids):
        item = invoice.find_item(item_id)
        if item is not None:
            issues.extend(_check_invoice_item(index, item))
    if issues:
        raise errors.ValidationError(issues)


class CreditCalculationService:
    """Service for computing billing credits."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """Initialize credit calculation service.

        Args:
            clock: Returns the current time for result timestamps; defaults
                to the current UTC time
        """
        self.clock = clock or _utc_now

    def calculate(
        self, items: Sequence[ServiceItem], tax_rate
    ) -> AggregatedCreditResult:
        """Calculate outage credits for services that started late.

        Args:
            items: Services to credit, in display order
            tax_rate: Percentage (0-100) applied to every credit

        Returns:
            AggregatedCreditResult with one calculation per item, in input order

        Raises:
            ValidationError: If the tax rate or any item is invalid
        """
        rate = validate_tax_rate(tax_rate)
        validate_service_items(items)

        calculations = tuple(self.calculate_item(item, rate) for item in items)
        total_credit = sum((c.credit_amount for c in calculations), Decimal("0"))
        total_tax = sum((c.tax_on_credit for c in calculations), Decimal("0"))

        return AggregatedCreditResult(
            calculations=calculations,
            total_credit_amount=total_credit,
            total_tax_on_credit=total_tax,
            grand_total=total_credit + total_tax,
            tax_rate=rate,
        )

    def calculate_item(self, item: ServiceItem, tax_rate: Decimal) -> CreditCalculation:
        """Calculate the outage credit for one already-validated item."""
        billing_start = item.billing_period.start
        total_billing_days = days_between(billing_start, item.billing_period.end)
        # The service start day itself was served.
        days_without_service = max(
            0, days_between(billing_start, item.actual_service_start_date) - 1
        )

        price = to_decimal(item.price_paid)
        rate = daily_rate(price, total_billing_days)
        credit_amount = outage_credit(price, total_billing_days, days_without_service)
        tax_on_credit = calculate_tax(credit_amount, tax_rate)

        logger.debug(
            "Service %r: %d of %d days without service, credit %s",
            item.name,
            days_without_service,
            total_billing_days,
            credit_amount,
        )

        return CreditCalculation(
            name=item.name,
            total_billing_days=total_billing_days,
            days_without_service=days_without_service,
            daily_rate=rate,
            credit_amount=credit_amount,
            tax_on_credit=tax_on_credit,
            total_credit_with_tax=credit_amount + tax_on_credit,
        )

    def calculate_invoice_credit(
        self, invoice: Invoice, request: CreditRequest
    ) -> InvoiceCreditResult:
        """Calculate credits for the invoice items named in a credit request.

        Items are credited in request order. IDs that are not on the invoice
        are skipped.

        Args:
            invoice: Invoice being credited
            request: Credit request naming item IDs and an optional period

        Returns:
            InvoiceCreditResult stamped with the calculation time

        Raises:
            ValidationError: If the request targets another invoice, the
                invoice tax rate is invalid, or a named item has a missing or
                non-positive amount or an invalid service period
            InvalidRangeError: If the credit period ends before it starts
        """
        if request.invoice_id != invoice.id:
            raise errors.ValidationError(
                [
                    ValidationIssue(
                        None,
                        None,
                        "invoice_id",
                        errors.invoice_mismatch(request.invoice_id, invoice.id),
                    )
                ]
            )
        tax_rate = validate_tax_rate(invoice.tax_rate)
        validate_invoice_items(invoice, request.items_to_credit)

        calculations: list[InvoiceItemCredit] = []
        for item_id in request.items_to_credit:
            item = invoice.find_item(item_id)
            if item is None:
                logger.warning(
                    "Item %r is not on invoice %r, skipping", item_id, invoice.id
                )
                continue
            calculations.append(self.calculate_invoice_item(item, request, tax_rate))

        total_credit = sum((c.credit_amount for c in calculations), Decimal("0"))
        total_tax = sum((c.tax_on_credit for c in calculations), Decimal("0"))

        return InvoiceCreditResult(
            request=request,
            calculations=tuple(calculations),
            total_credit=total_credit,
            total_tax=total_tax,
            final_credit_amount=total_credit + total_tax,
            calculation_date=self.clock(),
        )

    def calculate_invoice_item(
        self, item: InvoiceItem, request: CreditRequest, tax_rate: Decimal
    ) -> InvoiceItemCredit:
        """Calculate the credit for one invoice line item.

        A partial credit period only counts the days it shares with the
        item's own service period.
        """
        original_amount = to_decimal(item.unit_price) * item.quantity
        service_start = normalize_date(item.service_start_date)
        service_end = normalize_date(item.service_end_date)
        billing_days = days_between(service_start, service_end)

        if (
            request.is_partial_credit
            and request.credit_start_date is not None
            and request.credit_end_date is not None
        ):
            credit_start = normalize_date(request.credit_start_date)
            credit_end = normalize_date(request.credit_end_date)
            # Rejects an inverted credit period before clamping.
            days_between(credit_start, credit_end)
            overlap_start = max(credit_start, service_start)
            overlap_end = min(credit_end, service_end)
            credit_days = (
                days_between(overlap_start, overlap_end)
                if overlap_end >= overlap_start
                else 0
            )
            credit = partial_period_credit(original_amount, credit_days, billing_days)
        else:
            credit_days = billing_days
            credit = full_credit(original_amount)

        tax_on_credit = calculate_tax(credit.credit_amount, tax_rate)

        logger.debug(
            "Invoice item %r: %d of %d days credited, credit %s",
            item.id,
            credit_days,
            billing_days,
            credit.credit_amount,
        )

        return InvoiceItemCredit(
            item_id=item.id,
            original_amount=original_amount,
            prorated_amount=credit.credit_amount,
            credit_amount=credit.credit_amount,
            tax_on_credit=tax_on_credit,
            total_credit_with_tax=credit.credit_amount + tax_on_credit,
            credit_percentage=credit.credit_percentage,
            days_in_billing_period=billing_days,
            days_credited=credit_days,
        )
