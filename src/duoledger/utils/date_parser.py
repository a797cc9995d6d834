"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from duoledger.domain.entities import FilterCriteria, Party, Period


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "this month", "last month", etc.

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
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def last_months_start(months: int, today: Optional[date] = None) -> date:
    """First day of the month ``months - 1`` months before the current one.

    ``last_months_start(6)`` in July returns February 1st, so the range
    covers six calendar months including the current one.
    """
    if months < 1:
        raise ValueError(f"Month count must be at least 1, got {months}")
    today = today or date.today()
    return today.replace(day=1) - relativedelta(months=months - 1)


def get_date_range(
    period: Period | str, today: Optional[date] = None
) -> tuple[Optional[date], date]:
    """Get start and end dates for a summary period preset.

    Args:
        period: Period preset or its value (6m, 12m, ytd, all)
        today: Reference date, defaults to the current date

    Returns:
        Tuple of (start_date, end_date). The start is None for all time.

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    try:
        period = Period(period.strip().lower() if isinstance(period, str) else period)
    except ValueError:
        supported = ", ".join(p.value for p in Period)
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {supported}")

    if period is Period.LAST_6_MONTHS:
        return (last_months_start(6, today), today)

    elif period is Period.LAST_12_MONTHS:
        return (last_months_start(12, today), today)

    elif period is Period.YEAR_TO_DATE:
        return (today.replace(month=1, day=1), today)

    # All time: no lower bound, nothing after today
    return (None, today)


def criteria_for_period(
    period: Period | str,
    today: Optional[date] = None,
    counterparty_id: Optional[str] = None,
    responsible_party: Optional[Party] = None,
) -> FilterCriteria:
    """Build summary filter criteria covering a period preset."""
    start_date, end_date = get_date_range(period, today=today)
    return FilterCriteria(
        start_date=start_date,
        end_date=end_date,
        counterparty_id=counterparty_id,
        responsible_party=responsible_party,
    )
