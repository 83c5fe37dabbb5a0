"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow"
    - Month boundaries: "start of month", "end of month",
      "start of last month", "end of last month"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "start of month": today.replace(day=1),
        "end of month": today.replace(day=1) + relativedelta(months=1) - timedelta(days=1),
        "start of last month": (today - relativedelta(months=1)).replace(day=1),
        "end of last month": today.replace(day=1) - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
