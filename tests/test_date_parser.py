"""Tests for date and instant parsing."""

import pytest
from datetime import date, datetime, timedelta, UTC
from dateutil.relativedelta import relativedelta
from kidsmoney.utils.date_parser import parse_date, parse_instant

NOW = datetime(2024, 3, 15, 9, 30, tzinfo=UTC)


def utc_today():
    return datetime.now(UTC).date()


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_today_yesterday_tomorrow():
    """Test parsing simple relative days."""
    today = utc_today()
    assert parse_date("today") == today
    assert parse_date("Yesterday") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_parse_this_and_last_month():
    """Test parsing month-relative dates."""
    today = utc_today()
    assert parse_date("this month") == today.replace(day=1)
    assert parse_date("last month") == (today - relativedelta(months=1)).replace(day=1)


def test_parse_this_week():
    """Test that 'this week' starts on Monday."""
    result = parse_date("this week")
    assert result.weekday() == 0
    assert result <= utc_today()


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


def test_instant_now():
    """Test that 'now' is the reference instant."""
    assert parse_instant("now", now=NOW) == NOW


def test_instant_offsets():
    """Test relative offsets from now."""
    assert parse_instant("3 days ago", now=NOW) == NOW - timedelta(days=3)
    assert parse_instant("400 days from now", now=NOW) == NOW + timedelta(days=400)
    assert parse_instant("1 week ago", now=NOW) == NOW - timedelta(weeks=1)
    assert parse_instant("2 months from now", now=NOW) == datetime(2024, 5, 15, 9, 30, tzinfo=UTC)


def test_instant_with_offset():
    """Test timestamps that carry their own offset."""
    result = parse_instant("2024-01-15T08:30:00+02:00")
    assert result == datetime(2024, 1, 15, 6, 30, tzinfo=UTC)
    assert result.utcoffset() == timedelta(hours=2)


def test_naive_timestamp_is_utc():
    """Test that timestamps without an offset are taken as UTC."""
    assert parse_instant("2024-01-15 08:30") == datetime(2024, 1, 15, 8, 30, tzinfo=UTC)


def test_date_is_midnight_utc():
    """Test that plain dates mean the start of the day in UTC."""
    result = parse_instant("2024-01-15")
    assert result == datetime(2024, 1, 15, tzinfo=UTC)
    assert result.tzinfo is not None


def test_instant_is_always_aware():
    """Test that every accepted form is timezone-aware."""
    for text in ("now", "today", "5 days ago", "2024-06-01T00:00:00"):
        assert parse_instant(text, now=NOW).tzinfo is not None


def test_invalid_instant():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError):
        parse_instant("sometime soon", now=NOW)
