"""Date and timestamp parsing utilities.

Stored timestamps are ISO-8601 strings in UTC. Naive values coming from
users or spreadsheets are taken to be UTC as well.
"""

from datetime import date, datetime, time, timedelta, UTC
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def ensure_utc(value: datetime) -> datetime:
    """Return an aware datetime, treating naive input as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_iso(value: datetime) -> str:
    """Serialize a datetime for storage."""
    return ensure_utc(value).isoformat()


def from_iso(value: str) -> datetime:
    """Deserialize a stored timestamp."""
    return ensure_utc(date_parser.isoparse(value))


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15 Jan 2024") and a few relative
    forms: "today", "yesterday", "this month", "last month", "this year",
    "last year".

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_timestamp(value: str) -> datetime:
    """Parse a user or CSV supplied date/time into an aware datetime.

    Raises:
        ValueError: If the value is empty or cannot be parsed
    """
    if not value or not value.strip():
        raise ValueError("Empty date string")
    try:
        return ensure_utc(date_parser.parse(value.strip()))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")


def day_bounds(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Widen a date range to whole days.

    The start moves to the first instant of its day and the end to the last
    instant of its day. A missing end with a start present means the single
    start day.
    """
    if start is not None and end is None:
        end = start
    lower = datetime.combine(start, time.min, tzinfo=UTC) if start is not None else None
    upper = datetime.combine(end, time.max, tzinfo=UTC) if end is not None else None
    return lower, upper


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, last-month, this-year, last-year

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)

    if period == "this-month":
        return first_of_month, today
    if period == "last-month":
        return first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)
    if period == "this-year":
        return first_of_year, today
    if period == "last-year":
        return first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, last-month, this-year, last-year"
    )
