"""Tests for date parsing helpers."""

import pytest
from datetime import date, datetime, time, timedelta, timezone, UTC
from dateutil.relativedelta import relativedelta
from mahallu.utils.date_parser import (
    day_bounds,
    ensure_utc,
    from_iso,
    get_date_range,
    parse_date,
    parse_timestamp,
    to_iso,
)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("15 Jan 2024") == date(2024, 1, 15)


def test_parse_today_and_yesterday():
    """Test parsing 'today' and 'yesterday'."""
    assert parse_date("today") == date.today()
    assert parse_date("Yesterday") == date.today() - timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month' gives the first day of the previous month."""
    expected = (date.today() - relativedelta(months=1)).replace(day=1)
    assert parse_date("last month") == expected


def test_parse_this_year():
    """Test parsing 'this year'."""
    assert parse_date("this year") == date(date.today().year, 1, 1)


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


def test_parse_timestamp_is_aware():
    """Test that naive input is taken as UTC."""
    result = parse_timestamp("2024-03-01 10:30")
    assert result == datetime(2024, 3, 1, 10, 30, tzinfo=UTC)


def test_parse_timestamp_converts_offsets_to_utc():
    """Test that explicit offsets are converted to UTC."""
    result = parse_timestamp("2024-03-01T10:30:00+05:30")
    assert result == datetime(2024, 3, 1, 5, 0, tzinfo=UTC)
    assert result.utcoffset() == timedelta(0)


def test_parse_timestamp_rejects_empty():
    """Test that an empty value raises ValueError."""
    with pytest.raises(ValueError):
        parse_timestamp("  ")


def test_iso_round_trip_keeps_instant():
    """Test that stored timestamps come back as the same instant."""
    value = datetime(2024, 5, 1, 8, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    assert from_iso(to_iso(value)) == value
    assert from_iso(to_iso(value)).tzinfo == UTC


def test_ensure_utc_naive():
    """Test that a naive datetime gets UTC attached without shifting."""
    assert ensure_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=UTC)


def test_day_bounds_single_day():
    """Test that a missing end means the start day only."""
    lower, upper = day_bounds(date(2024, 2, 10), None)
    assert lower == datetime(2024, 2, 10, 0, 0, tzinfo=UTC)
    assert upper == datetime.combine(date(2024, 2, 10), time.max, tzinfo=UTC)


def test_day_bounds_range():
    """Test that both ends are widened to whole days."""
    lower, upper = day_bounds(date(2024, 2, 1), date(2024, 2, 29))
    assert lower.date() == date(2024, 2, 1)
    assert upper.date() == date(2024, 2, 29)
    assert upper.hour == 23 and upper.minute == 59


def test_day_bounds_open():
    """Test that no dates give an open range."""
    assert day_bounds(None, None) == (None, None)


def test_get_date_range_last_month():
    """Test the last-month period."""
    start, end = get_date_range("last-month")
    first_of_month = date.today().replace(day=1)
    assert start == first_of_month - relativedelta(months=1)
    assert end == first_of_month - timedelta(days=1)


def test_get_date_range_this_year():
    """Test the this-year period."""
    start, end = get_date_range("this-year")
    assert start == date(date.today().year, 1, 1)
    assert end == date.today()


def test_get_date_range_unknown():
    """Test that unknown periods raise ValueError."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("next-decade")
