"""Domain model entities for creditcalc.

These are pure value objects. Inputs are constructed fresh for each
calculation request and results are never mutated after they are produced.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class BillingCycle(str, Enum):
    """Length of a recurring billing cycle."""

    DAILY = "daily"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class BillingPeriod:
    """Date span an invoice charges for.

    Dates are optional so raw form input can be represented and rejected
    by validation rather than at construction time.
    """

    start: Optional[date]
    end: Optional[date]


@dataclass(frozen=True)
class ServiceItem:
    """A billed service whose actual start may lag the billing period."""

    name: Optional[str]
    price_paid: Optional[Decimal]
    billing_period: Optional[BillingPeriod]
    actual_service_start_date: Optional[date]


@dataclass(frozen=True)
class CreditCalculation:
    """Outage credit computed for a single service item."""

    name: str
    total_billing_days: int
    days_without_service: int
    daily_rate: Decimal
    credit_amount: Decimal
    tax_on_credit: Decimal
    total_credit_with_tax: Decimal


@dataclass(frozen=True)
class AggregatedCreditResult:
    """Per-item outage credits in input order plus their totals."""

    calculations: tuple[CreditCalculation, ...]
    total_credit_amount: Decimal
    total_tax_on_credit: Decimal
    grand_total: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class ValidationIssue:
    """One failed check on one input item."""

    index: Optional[int]
    item_name: Optional[str]
    field: str
    message: str


@dataclass(frozen=True)
class Customer:
    """Invoice customer."""

    id: str
    name: str
    email: str = ""
    account_number: str = ""


@dataclass(frozen=True)
class InvoiceItem:
    """Invoice line item with its own service period."""

    id: str
    description: str
    unit_price: Decimal
    quantity: int
    service_start_date: date
    service_end_date: date
    is_prorated: bool = False

    @property
    def original_amount(self) -> Decimal:
        """Amount charged for this line."""
        return Decimal(str(self.unit_price)) * self.quantity


@dataclass(frozen=True)
class Invoice:
    """Customer invoice."""

    id: str
    customer: Customer
    invoice_number: str
    invoice_date: date
    due_date: date
    items: tuple[InvoiceItem, ...]
    tax_rate: Decimal

    @property
    def subtotal(self) -> Decimal:
        return sum((item.original_amount for item in self.items), Decimal("0"))

    @property
    def tax_amount(self) -> Decimal:
        return self.subtotal * Decimal(str(self.tax_rate)) / Decimal("100")

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax_amount

    def find_item(self, item_id: str) -> Optional[InvoiceItem]:
        """Return the line item with the given ID, if any."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class CreditRequest:
    """Customer request to credit some items of an invoice."""

    invoice_id: str
    customer_id: str
    credit_reason: str
    request_date: date
    items_to_credit: tuple[str, ...]
    credit_start_date: Optional[date] = None
    credit_end_date: Optional[date] = None
    is_partial_credit: bool = False


@dataclass(frozen=True)
class InvoiceItemCredit:
    """Credit computed for a single invoice line item."""

    item_id: str
    original_amount: Decimal
    prorated_amount: Decimal
    credit_amount: Decimal
    tax_on_credit: Decimal
    total_credit_with_tax: Decimal
    credit_percentage: Decimal
    days_in_billing_period: int
    days_credited: int


@dataclass(frozen=True)
class InvoiceCreditResult:
    """Credits for the requested invoice items plus their totals."""

    request: CreditRequest
    calculations: tuple[InvoiceItemCredit, ...]
    total_credit: Decimal
    total_tax: Decimal
    final_credit_amount: Decimal
    calculation_date: datetime = field(compare=False)
