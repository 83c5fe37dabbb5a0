"""Proration arithmetic.

Two request shapes are supported:

- outage credit: a count of days without service at a daily rate
- partial-period credit: an explicit credited span relative to the billed span

Amounts stay unrounded ``Decimal`` values; rounding is left to display.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import NamedTuple

from creditcalc.domain.day_span import days_between, days_in_billing_cycle
from creditcalc.domain.entities import BillingCycle

HUNDRED = Decimal("100")


class ProratedCredit(NamedTuple):
    """Credit for part (or all) of an amount."""

    credit_amount: Decimal
    credit_percentage: Decimal


def daily_rate(price_paid: Decimal, total_billing_days: int) -> Decimal:
    """Amount paid per billed day.

    Raises:
        ZeroDivisionError: If total_billing_days is zero
    """
    if total_billing_days == 0:
        raise ZeroDivisionError("Billing period must span at least one day")
    return Decimal(price_paid) / Decimal(total_billing_days)


def outage_credit(
    price_paid: Decimal, total_billing_days: int, days_without_service: int
) -> Decimal:
    """Credit for days paid for but not served.

    Negative day counts are clamped to zero.
    """
    rate = daily_rate(price_paid, total_billing_days)
    return rate * Decimal(max(0, days_without_service))


def partial_period_credit(
    original_amount: Decimal, credit_days: int, billing_days: int
) -> ProratedCredit:
    """Credit for an explicit number of days out of the billed days."""
    if billing_days == 0:
        raise ZeroDivisionError("Billing period must span at least one day")
    credit_days = max(0, credit_days)
    amount = Decimal(original_amount) * Decimal(credit_days) / Decimal(billing_days)
    return ProratedCredit(amount, Decimal(credit_days) / Decimal(billing_days))


def full_credit(original_amount: Decimal) -> ProratedCredit:
    return ProratedCredit(Decimal(original_amount), Decimal(1))


def prorated_amount(
    rate: Decimal,
    service_start: date | datetime,
    service_end: date | datetime,
    cycle: BillingCycle = BillingCycle.MONTHLY,
) -> Decimal:
    """Charge for a service used from service_start to service_end.

    The cycle length is taken from the cycle containing service_start, so a
    monthly rate used for all of February yields the full rate.

    Args:
        rate: Price of one full billing cycle
        service_start: First day of use
        service_end: Last day of use
        cycle: Billing cycle the rate is quoted for

    Returns:
        Prorated charge

    Raises:
        InvalidRangeError: If service_end is before service_start
    """
    used_days = days_between(service_start, service_end)
    cycle_days = days_in_billing_cycle(cycle, service_start)
    return daily_rate(rate, cycle_days) * Decimal(used_days)


def calculate_tax(amount: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax on amount at a percentage rate."""
    return Decimal(amount) * (Decimal(tax_rate) / HUNDRED)
