"""Shared pytest fixtures for creditcalc tests."""

from datetime import date, datetime, timezone
from decimal import Decimal
import pytest

from creditcalc.domain.credit import CreditCalculationService
from creditcalc.domain.entities import (
    BillingPeriod,
    CreditRequest,
    Customer,
    Invoice,
    InvoiceItem,
    ServiceItem,
)

FIXED_NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def credit_service():
    """Create a CreditCalculationService with a fixed clock."""
    return CreditCalculationService(clock=lambda: FIXED_NOW)


@pytest.fixture
def january():
    """Billing period covering January 2024."""
    return BillingPeriod(start=date(2024, 1, 1), end=date(2024, 1, 31))


@pytest.fixture
def make_service(january):
    """Factory for service items billed for January 2024."""

    def _make(name="Internet Service", price="79.99", service_start=date(2024, 1, 10), period=None):
        return ServiceItem(
            name=name,
            price_paid=Decimal(price) if price is not None else None,
            billing_period=period if period is not None else january,
            actual_service_start_date=service_start,
        )

    return _make


@pytest.fixture
def sample_invoice():
    """Create a two-item invoice for January 2024."""
    start = date(2024, 1, 1)
    end = date(2024, 1, 31)
    return Invoice(
        id="INV-001",
        customer=Customer(id="CUST-001", name="Sample Customer"),
        invoice_number="SAMPLE-001",
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 15),
        items=(
            InvoiceItem(
                id="ITEM-001",
                description="High-Speed Internet Service - 100 Mbps",
                unit_price=Decimal("79.99"),
                quantity=1,
                service_start_date=start,
                service_end_date=end,
            ),
            InvoiceItem(
                id="ITEM-002",
                description="Static IP Address",
                unit_price=Decimal("15.00"),
                quantity=1,
                service_start_date=start,
                service_end_date=end,
            ),
        ),
        tax_rate=Decimal("13.0"),
    )


@pytest.fixture
def make_request():
    """Factory for credit requests against the sample invoice."""

    def _make(items=("ITEM-001",), start=None, end=None, partial=None, invoice_id="INV-001"):
        return CreditRequest(
            invoice_id=invoice_id,
            customer_id="CUST-001",
            credit_reason="Service outage",
            request_date=date(2024, 2, 1),
            items_to_credit=tuple(items),
            credit_start_date=start,
            credit_end_date=end,
            is_partial_credit=(start is not None) if partial is None else partial,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def services_csv(tmp_path):
    """Write a two-service outage CSV file."""
    path = tmp_path / "services.csv"
    path.write_text(
        "name,billing_start,billing_end,price_paid,service_start\n"
        "Internet Service,2024-01-01,2024-01-31,$79.99,2024-01-09\n"
        "Static IP,2024-01-01,2024-01-31,15.00,2024-01-01\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def invoice_csv(tmp_path):
    """Write a two-item invoice CSV file."""
    path = tmp_path / "INV-001.csv"
    path.write_text(
        "id,description,unit_price,quantity,service_start,service_end\n"
        "ITEM-001,High-Speed Internet Service,79.99,1,2024-01-01,2024-01-31\n"
        "ITEM-002,Static IP Address,15.00,1,2024-01-01,2024-01-31\n",
        encoding="utf-8",
    )
    return path
