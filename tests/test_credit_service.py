"""Tests for outage credit calculation."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from creditcalc.domain.credit import validate_tax_rate, to_decimal
from creditcalc.domain.entities import BillingPeriod, ServiceItem
from creditcalc.domain.errors import ValidationError

CENT = Decimal("0.01")


def _fields(excinfo):
    return [(issue.index, issue.field) for issue in excinfo.value.issues]


class TestCalculate:
    """Tests for CreditCalculationService.calculate."""

    def test_late_start_credit(self, credit_service, make_service):
        """Service unavailable January 1-8 is credited eight days."""
        result = credit_service.calculate([make_service(service_start=date(2024, 1, 9))], 13)

        calc = result.calculations[0]
        assert calc.name == "Internet Service"
        assert calc.total_billing_days == 31
        assert calc.days_without_service == 8
        assert calc.daily_rate.quantize(Decimal("0.001")) == Decimal("2.580")
        assert calc.credit_amount.quantize(CENT) == Decimal("20.64")
        assert calc.tax_on_credit.quantize(CENT) == Decimal("2.68")
        assert abs(calc.total_credit_with_tax - Decimal("23.32")) < CENT

    def test_service_start_day_is_served(self, credit_service, make_service):
        """Starting on the 10th leaves the 1st through the 9th unserved.

        This deliberately differs from the worked example that quotes 8
        unserved days for a January 10 start; that figure came from a local
        time to UTC date shift. See test_late_start_credit for those numbers.
        """
        result = credit_service.calculate([make_service(service_start=date(2024, 1, 10))], 13)

        calc = result.calculations[0]
        assert calc.days_without_service == 9
        assert calc.credit_amount == calc.daily_rate * 9

    def test_start_on_billing_start_has_no_credit(self, credit_service, make_service):
        result = credit_service.calculate([make_service(service_start=date(2024, 1, 1))], 13)

        calc = result.calculations[0]
        assert calc.days_without_service == 0
        assert calc.credit_amount == 0
        assert calc.tax_on_credit == 0
        assert result.grand_total == 0

    def test_start_on_billing_end(self, credit_service, make_service):
        result = credit_service.calculate([make_service(service_start=date(2024, 1, 31))], 0)

        calc = result.calculations[0]
        assert calc.days_without_service == 30
        assert calc.credit_amount < Decimal("79.99")

    def test_invariants_hold_exactly(self, credit_service, make_service):
        rate = Decimal("13")
        result = credit_service.calculate([make_service()], rate)

        calc = result.calculations[0]
        assert calc.days_without_service <= calc.total_billing_days
        assert calc.daily_rate == Decimal("79.99") / Decimal(calc.total_billing_days)
        assert calc.credit_amount == calc.daily_rate * calc.days_without_service
        assert calc.total_credit_with_tax == calc.credit_amount + calc.tax_on_credit
        assert calc.total_credit_with_tax == (
            calc.credit_amount + calc.credit_amount * (rate / Decimal("100"))
        )

    def test_two_items_keep_order(self, credit_service, make_service):
        items = [
            make_service(name="Internet", price="31.00", service_start=date(2024, 1, 5)),
            make_service(name="Static IP", price="62.00", service_start=date(2024, 1, 11)),
        ]
        result = credit_service.calculate(items, 10)

        assert [c.name for c in result.calculations] == ["Internet", "Static IP"]
        assert result.calculations[0].credit_amount == Decimal("4")
        assert result.calculations[1].credit_amount == Decimal("20")
        assert result.total_credit_amount == Decimal("24")
        assert result.total_tax_on_credit == Decimal("2.4")
        assert result.grand_total == Decimal("26.4")

    def test_totals_equal_sum_of_items(self, credit_service, make_service):
        items = [
            make_service(name="A", price="79.99", service_start=date(2024, 1, 9)),
            make_service(name="B", price="15.00", service_start=date(2024, 1, 20)),
            make_service(name="C", price="42.50", service_start=date(2024, 1, 1)),
        ]
        result = credit_service.calculate(items, Decimal("13"))

        credit_sum = sum((c.credit_amount for c in result.calculations), Decimal("0"))
        tax_sum = sum((c.tax_on_credit for c in result.calculations), Decimal("0"))
        assert result.total_credit_amount == credit_sum
        assert result.total_tax_on_credit == tax_sum
        assert result.grand_total == result.total_credit_amount + result.total_tax_on_credit

    def test_tax_rate_applies_to_every_item(self, credit_service, make_service):
        items = [
            make_service(name="A", price="31.00", service_start=date(2024, 1, 3)),
            make_service(name="B", price="62.00", service_start=date(2024, 1, 3)),
        ]
        result = credit_service.calculate(items, "50")

        assert result.tax_rate == Decimal("50")
        for calc in result.calculations:
            assert calc.tax_on_credit == calc.credit_amount / 2

    def test_different_billing_periods(self, credit_service, make_service):
        february = BillingPeriod(start=date(2024, 2, 1), end=date(2024, 2, 29))
        items = [
            make_service(name="January", price="31", service_start=date(2024, 1, 2)),
            make_service(
                name="February", price="29", service_start=date(2024, 2, 3), period=february
            ),
        ]
        result = credit_service.calculate(items, 0)

        assert result.calculations[0].total_billing_days == 31
        assert result.calculations[1].total_billing_days == 29
        assert result.grand_total == Decimal("3")

    def test_accepts_datetimes(self, credit_service):
        item = ServiceItem(
            name="Internet",
            price_paid=Decimal("31"),
            billing_period=BillingPeriod(
                start=datetime(2024, 1, 1, 8, 0), end=datetime(2024, 1, 31, 23, 0)
            ),
            actual_service_start_date=datetime(2024, 1, 3, 0, 30),
        )
        result = credit_service.calculate([item], 0)

        assert result.calculations[0].total_billing_days == 31
        assert result.calculations[0].days_without_service == 2

    def test_result_is_immutable(self, credit_service, make_service):
        result = credit_service.calculate([make_service()], 13)
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            result.grand_total = Decimal("0")

    def test_logs_item_details(self, credit_service, make_service, caplog):
        with caplog.at_level(logging.DEBUG, logger="creditcalc.domain.credit"):
            credit_service.calculate([make_service()], 13)
        assert "9 of 31 days without service" in caplog.text


class TestValidation:
    """Tests for outage input validation."""

    def test_service_start_after_billing_end(self, credit_service, make_service):
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([make_service(service_start=date(2024, 2, 1))], 13)
        assert _fields(excinfo) == [(0, "actual_service_start_date")]
        assert "cannot be after its invoice end date" in str(excinfo.value)

    def test_service_start_before_billing_start(self, credit_service, make_service):
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([make_service(service_start=date(2023, 12, 31))], 13)
        assert _fields(excinfo) == [(0, "actual_service_start_date")]
        assert "cannot be before its invoice start date" in str(excinfo.value)

    def test_inverted_billing_period(self, credit_service, make_service):
        period = BillingPeriod(start=date(2024, 1, 31), end=date(2024, 1, 1))
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate(
                [make_service(service_start=date(2024, 1, 15), period=period)], 13
            )
        assert _fields(excinfo) == [(0, "billing_period")]

    def test_zero_length_billing_period(self, credit_service, make_service):
        period = BillingPeriod(start=date(2024, 1, 1), end=date(2024, 1, 1))
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate(
                [make_service(service_start=date(2024, 1, 1), period=period)], 13
            )
        assert "Invoice end date must be after start date" in str(excinfo.value)

    @pytest.mark.parametrize("price", ["0", "-5.00"])
    def test_non_positive_price(self, credit_service, make_service, price):
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([make_service(price=price)], 13)
        assert _fields(excinfo) == [(0, "price_paid")]

    def test_missing_fields(self, credit_service):
        item = ServiceItem(
            name=None,
            price_paid=None,
            billing_period=BillingPeriod(start=None, end=None),
            actual_service_start_date=None,
        )
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([item], 13)
        assert _fields(excinfo) == [
            (0, "name"),
            (0, "price_paid"),
            (0, "billing_period.start"),
            (0, "billing_period.end"),
            (0, "actual_service_start_date"),
        ]
        assert "Unnamed Service" in str(excinfo.value)

    def test_missing_billing_period(self, credit_service):
        item = ServiceItem(
            name="Internet",
            price_paid=Decimal("10"),
            billing_period=None,
            actual_service_start_date=date(2024, 1, 1),
        )
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([item], 13)
        assert _fields(excinfo) == [(0, "billing_period.start"), (0, "billing_period.end")]

    def test_reports_every_offending_item(self, credit_service, make_service):
        items = [
            make_service(name="Good"),
            make_service(name="Late", service_start=date(2024, 3, 1)),
            make_service(name="Free", price="0"),
        ]
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate(items, 13)

        assert _fields(excinfo) == [(1, "actual_service_start_date"), (2, "price_paid")]
        assert [issue.item_name for issue in excinfo.value.issues] == ["Late", "Free"]

    def test_no_items(self, credit_service):
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([], 13)
        assert "At least one service" in str(excinfo.value)

    @pytest.mark.parametrize("rate", [-1, "100.01", None, "abc"])
    def test_invalid_tax_rate(self, credit_service, make_service, rate):
        with pytest.raises(ValidationError) as excinfo:
            credit_service.calculate([make_service()], rate)
        assert _fields(excinfo) == [(None, "tax_rate")]

    def test_validation_error_is_value_error(self, credit_service, make_service):
        with pytest.raises(ValueError):
            credit_service.calculate([make_service(price="0")], 13)


def test_validate_tax_rate_bounds():
    assert validate_tax_rate(0) == Decimal("0")
    assert validate_tax_rate("100") == Decimal("100")
    assert validate_tax_rate(13.5) == Decimal("13.5")


def test_to_decimal():
    assert to_decimal(79.99) == Decimal("79.99")
    assert to_decimal("15") == Decimal("15")
    with pytest.raises(ValueError):
        to_decimal("fifteen")
