"""Calendar day arithmetic.

All functions work on whole calendar days. Datetimes are normalized to their
UTC calendar date first so time-of-day and zone offsets never shift a count.
"""

from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from creditcalc.domain import errors
from creditcalc.domain.entities import BillingCycle


def normalize_date(value: date | datetime) -> date:
    """Return the calendar date for a date or datetime.

    Aware datetimes are converted to UTC before the time is dropped; naive
    datetimes are taken as-is.

    Raises:
        TypeError: If value is not a date or datetime
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Count days from start to end, both inclusive.

    Args:
        start: First day of the span
        end: Last day of the span

    Returns:
        Number of days, at least 1

    Raises:
        InvalidRangeError: If end is before start
    """
    start_day = normalize_date(start)
    end_day = normalize_date(end)
    if end_day < start_day:
        raise errors.InvalidRangeError(errors.inverted_range(start_day, end_day))
    return (end_day - start_day).days + 1


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    first = date(year, month, 1)
    return ((first + relativedelta(months=1)) - first).days


def days_in_quarter(reference: date) -> int:
    """Number of days in the calendar quarter containing reference."""
    quarter_start = date(reference.year, 3 * ((reference.month - 1) // 3) + 1, 1)
    quarter_end = quarter_start + relativedelta(months=3) - timedelta(days=1)
    return days_between(quarter_start, quarter_end)


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def days_in_billing_cycle(cycle: BillingCycle, reference: date | datetime) -> int:
    """Number of days in the billing cycle that contains reference."""
    day = normalize_date(reference)
    if cycle == BillingCycle.DAILY:
        return 1
    elif cycle == BillingCycle.MONTHLY:
        return days_in_month(day.year, day.month)
    elif cycle == BillingCycle.QUARTERLY:
        return days_in_quarter(day)
    elif cycle == BillingCycle.YEARLY:
        return days_in_year(day.year)
    raise ValueError(f"Unknown billing cycle: {cycle!r}")
