"""Time and date utilities for the investment views.

This module provides centralized functions for resolving reporting periods,
parsing broker date strings and deciding whether a price is stale.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple
import calendar
import logging
import re

logger = logging.getLogger(__name__)

TIME_RANGES = ("MONTH", "QUARTER", "HALF_YEAR", "YEAR", "CUSTOM", "ALL")

_DATE_PATTERN = re.compile(r"^(\d{4})[/-]?(\d{1,2})[/-]?(\d{1,2})")


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def resolve_time_range(
    range_str: str,
    today: Optional[date] = None,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> Tuple[Optional[date], Optional[date]]:
    """
    Convert a reporting period name to an inclusive (start_date, end_date) pair.

    Periods are calendar aligned, not rolling:
    - "MONTH": first to last day of the current month
    - "QUARTER": first to last day of the current calendar quarter
    - "HALF_YEAR": Jan 1 - Jun 30 or Jul 1 - Dec 31
    - "YEAR": Jan 1 - Dec 31 of the current year
    - "CUSTOM": custom_start / custom_end; a missing bound stays open
    - "ALL": (None, None)

    Args:
        range_str: Period name, case-insensitive
        today: Reference date (defaults to date.today())
        custom_start: Start date for "CUSTOM"
        custom_end: End date for "CUSTOM"

    Returns:
        Tuple of (start_date, end_date); None means unbounded on that side.

    Raises:
        ValueError: If range_str is not a known period

    Examples:
        >>> resolve_time_range("QUARTER", today=date(2024, 5, 20))
        (datetime.date(2024, 4, 1), datetime.date(2024, 6, 30))
        >>> resolve_time_range("ALL")
        (None, None)
    """
    if today is None:
        today = date.today()

    period = (range_str or "").strip().upper()

    if period == "ALL":
        return None, None
    elif period == "MONTH":
        return date(today.year, today.month, 1), _month_end(today.year, today.month)
    elif period == "QUARTER":
        first_month = ((today.month - 1) // 3) * 3 + 1
        return date(today.year, first_month, 1), _month_end(today.year, first_month + 2)
    elif period == "HALF_YEAR":
        first_month = 1 if today.month <= 6 else 7
        return date(today.year, first_month, 1), _month_end(today.year, first_month + 5)
    elif period == "YEAR":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    elif period == "CUSTOM":
        return custom_start, custom_end
    else:
        raise ValueError(
            f"Invalid range parameter. Must be one of: {', '.join(TIME_RANGES)}. Got: {range_str}"
        )


def get_date_range_description(start_date: Optional[date], end_date: Optional[date]) -> str:
    """
    Get the display label of a date range.

    Examples:
        >>> get_date_range_description(date(2024, 1, 1), date(2024, 3, 31))
        '2024/01/01 ~ 2024/03/31'
        >>> get_date_range_description(None, None)
        '所有紀錄'
    """
    if start_date is None and end_date is None:
        return "所有紀錄"

    date_format = "%Y/%m/%d"

    if start_date is None:
        return f"~ {end_date.strftime(date_format)}"
    elif end_date is None:
        return f"{start_date.strftime(date_format)} ~"
    else:
        return f"{start_date.strftime(date_format)} ~ {end_date.strftime(date_format)}"


def parse_date_string(date_str: str) -> Optional[date]:
    """
    Parse a broker date string into a date.

    Accepts "YYYY/MM/DD", "YYYY-MM-DD" and "YYYYMMDD"; trailing text such as a
    time of day is ignored.

    Args:
        date_str: Date string

    Returns:
        Parsed date, or None if the string is not a valid date
    """
    if not date_str:
        return None

    match = _DATE_PATTERN.match(date_str.strip())
    if not match:
        return None

    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        logger.debug(f"Out of range date string: {date_str}")
        return None


def is_stale(
    last_updated: Optional[datetime],
    now: Optional[datetime] = None,
    threshold_days: int = 14
) -> bool:
    """
    Check whether a price refreshed at last_updated is older than the threshold.

    A missing timestamp counts as stale. Naive datetimes are taken as UTC.
    """
    if last_updated is None:
        return True

    if now is None:
        now = datetime.now(timezone.utc)

    if last_updated.tzinfo is None:
        last_updated = last_updated.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return (now - last_updated) > timedelta(days=threshold_days)
