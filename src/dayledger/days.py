"""Ledger-day boundaries, ISO date helpers and day navigation."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from dayledger.models import HOURS_PER_DAY

# Day starts at 5 AM; hours 0-4 belong to the previous day
DAY_START_HOUR = 5

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def format_iso_date(day: date) -> str:
    """Format a calendar date as YYYY-MM-DD."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string into a calendar date.

    Built from the explicit year/month/day parts so no timezone conversion
    can shift the day.

    Raises:
        ValueError: If the string is not a valid YYYY-MM-DD date.
    """
    match = _ISO_DATE.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"Invalid date string format: {value!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def ledger_today(now: datetime | None = None) -> str:
    """Get the ledger day for the current moment.

    Between midnight and 04:59 the ledger is still on the previous calendar
    day, so a user awake at 2 AM logs against yesterday.

    Args:
        now: Optional current time for testing (defaults to local now).

    Returns:
        ISO date string of the ledger day.
    """
    if now is None:
        now = datetime.now()
    day = now.date()
    if now.hour < DAY_START_HOUR:
        day -= timedelta(days=1)
    return format_iso_date(day)


def previous_day(value: str) -> str:
    return format_iso_date(parse_iso_date(value) - timedelta(days=1))


def next_day(value: str, today: str | None = None) -> str | None:
    """Get the day after ``value``, or None if that would be past today."""
    candidate = format_iso_date(parse_iso_date(value) + timedelta(days=1))
    if not can_navigate_to(candidate, today):
        return None
    return candidate


def can_navigate_to(value: str, today: str | None = None) -> bool:
    """Check that a date is not in the future relative to the ledger day."""
    if today is None:
        today = ledger_today()
    return parse_iso_date(value) <= parse_iso_date(today)


def is_today(value: str, today: str | None = None) -> bool:
    if today is None:
        today = ledger_today()
    return parse_iso_date(value) == parse_iso_date(today)


def ledger_hours() -> list[int]:
    """Clock hours in ledger-day order: 5, 6, ... 23, 0, ... 4."""
    return [(DAY_START_HOUR + offset) % HOURS_PER_DAY for offset in range(HOURS_PER_DAY)]


def format_hour(hour: int) -> str:
    """Format an hour for display (e.g., 0 -> '12:00 am', 13 -> '1:00 pm').

    Unwrapped hours past midnight (24-47) are shown on the clock.
    """
    hour %= HOURS_PER_DAY
    period = "am" if hour < 12 else "pm"
    if hour == 0:
        display = 12
    elif hour > 12:
        display = hour - 12
    else:
        display = hour
    return f"{display}:00 {period}"


def format_day(value: str) -> str:
    """Format an ISO date for report headers, like 'Jan 25, 2025'."""
    return parse_iso_date(value).strftime("%b %d, %Y")
