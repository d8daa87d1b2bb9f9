"""Tests for ledger-day boundaries and date helpers."""

from datetime import date, datetime, timedelta

import pytest

from dayledger.days import (
    can_navigate_to,
    format_day,
    format_hour,
    format_iso_date,
    is_today,
    ledger_hours,
    ledger_today,
    next_day,
    parse_iso_date,
    previous_day,
)


class TestLedgerToday:
    """The ledger day starts at 05:00, not midnight."""

    def test_before_five_am_is_yesterday(self):
        """2:30 AM belongs to the previous day."""
        assert ledger_today(datetime(2025, 1, 25, 2, 30)) == "2025-01-24"

    def test_at_five_am_is_today(self):
        """5:00 AM starts the new day."""
        assert ledger_today(datetime(2025, 1, 25, 5, 0)) == "2025-01-25"

    def test_midnight_is_yesterday(self):
        """Midnight belongs to the previous day."""
        assert ledger_today(datetime(2025, 1, 25, 0, 0)) == "2025-01-24"

    def test_late_evening_is_today(self):
        """Late evening is still today."""
        assert ledger_today(datetime(2025, 1, 25, 23, 59)) == "2025-01-25"

    def test_cutoff_crosses_year_boundary(self):
        """Early New Year's morning belongs to the old year."""
        assert ledger_today(datetime(2025, 1, 1, 4, 59)) == "2024-12-31"


class TestIsoDates:
    """Tests for parsing and formatting YYYY-MM-DD."""

    def test_round_trip_every_day_of_a_leap_year(self):
        """Every day of 2024 formats and parses back."""
        day = date(2024, 1, 1)
        while day.year == 2024:
            assert parse_iso_date(format_iso_date(day)) == day
            day += timedelta(days=1)

    def test_format_pads(self):
        """Years, months and days are zero-padded."""
        assert format_iso_date(date(987, 3, 4)) == "0987-03-04"

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "2025-01",
            "2025/01/25",
            "2025-13-01",
            "abcd-ef-gh",
            "2025-1-5",
            "+2025-01-05",
            "2025-01-05T00",
        ],
    )
    def test_invalid_dates_raise(self, value):
        """Anything but YYYY-MM-DD raises ValueError."""
        with pytest.raises(ValueError):
            parse_iso_date(value)

    def test_format_day(self):
        """Days are shown like 'Jan 25, 2025'."""
        assert format_day("2025-01-25") == "Jan 25, 2025"


class TestNavigation:
    """Tests for day-to-day navigation bounds."""

    def test_previous_day_is_unrestricted(self):
        """Going back crosses month ends."""
        assert previous_day("2025-03-01") == "2025-02-28"

    def test_next_day_within_bounds(self):
        """The next day is allowed up to today."""
        assert next_day("2025-01-24", today="2025-01-25") == "2025-01-25"

    def test_next_day_past_today_rejected(self):
        """There is no next day after today."""
        assert next_day("2025-01-25", today="2025-01-25") is None

    def test_can_navigate_to(self):
        """Past days and today are allowed, the future is not."""
        assert can_navigate_to("2020-01-01", today="2025-01-25")
        assert can_navigate_to("2025-01-25", today="2025-01-25")
        assert not can_navigate_to("2025-01-26", today="2025-01-25")

    def test_is_today(self):
        """Only the ledger day counts as today."""
        assert is_today("2025-01-25", today="2025-01-25")
        assert not is_today("2025-01-24", today="2025-01-25")


class TestHours:
    """Tests for hour ordering and display."""

    @pytest.mark.parametrize(
        ("hour", "expected"),
        [
            (0, "12:00 am"),
            (5, "5:00 am"),
            (12, "12:00 pm"),
            (13, "1:00 pm"),
            (23, "11:00 pm"),
            (30, "6:00 am"),
        ],
    )
    def test_format_hour(self, hour, expected):
        """Hours are shown on a 12-hour clock."""
        assert format_hour(hour) == expected

    def test_ledger_hours_start_at_five(self):
        """The ledger day runs 5 AM through 4 AM."""
        hours = ledger_hours()
        assert hours[0] == 5
        assert hours[-1] == 4
        assert sorted(hours) == list(range(24))
