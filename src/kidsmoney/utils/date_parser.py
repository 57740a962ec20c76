"""Date and instant parsing utilities."""

from datetime import date, datetime, time, timedelta, UTC
import re

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_OFFSET_PATTERN = re.compile(r"^(\d+)\s+(day|days|week|weeks|month|months|year|years)\s+(ago|from now)$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "this month",
      "last month", "this year", "last week", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = datetime.now(UTC).date()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Handle "last/this" + time period
    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_instant(value: str, now: datetime | None = None) -> datetime:
    """Parse a point in time into a timezone-aware datetime.

    Supports:
    - "now"
    - Offsets from now: "3 days ago", "400 days from now", "2 weeks ago"
    - Absolute timestamps: "2024-01-15T08:30:00+02:00", "2024-01-15 08:30"
    - Dates and relative dates accepted by parse_date (midnight UTC)

    Timestamps without an offset are taken to be UTC.

    Args:
        value: String to parse
        now: Reference instant for "now" and offsets (defaults to current UTC time)

    Returns:
        Aware datetime

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = value.strip().lower()
    now = now if now is not None else datetime.now(UTC)

    if text == "now":
        return now

    match = _OFFSET_PATTERN.match(text)
    if match:
        count, unit, direction = match.groups()
        unit = unit if unit.endswith("s") else unit + "s"
        offset = relativedelta(**{unit: int(count)})
        return now - offset if direction == "ago" else now + offset

    if any(sep in text for sep in ("t", ":")) and text[:1].isdigit():
        try:
            parsed = date_parser.isoparse(value.strip())
        except ValueError:
            try:
                parsed = date_parser.parse(value.strip())
            except (ValueError, OverflowError) as e:
                raise ValueError(f"Could not parse time '{value}': {e}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed

    return datetime.combine(parse_date(text), time.min, tzinfo=UTC)
