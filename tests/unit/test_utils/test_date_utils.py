# tests/unit/test_utils/test_date_utils.py

"""Tests for date_utils: ISO days, weekdays and relative cutoffs."""

from __future__ import annotations

import pytest

from smartlists.utils.date_utils import (
    EARLIEST_TIMESTAMP,
    SECONDS_PER_DAY,
    day_bounds,
    format_timestamp,
    parse_iso_day,
    parse_relative_spec,
    relative_cutoff,
    weekday_sunday_first,
)

# 2024-03-10T00:00:00Z (Sunday)
MARCH_10 = 1710028800.0


# ==================================================================
# Absolute dates
# ==================================================================


class TestIsoDays:
    """Tests for parse_iso_day and day_bounds."""

    def test_parses_midnight_utc(self) -> None:
        """YYYY-MM-DD resolves to midnight UTC."""
        assert parse_iso_day("2024-03-10").timestamp() == MARCH_10

    def test_surrounding_whitespace_ignored(self) -> None:
        """Leading and trailing blanks are tolerated."""
        assert parse_iso_day("  2024-03-10 ").timestamp() == MARCH_10

    @pytest.mark.parametrize("value", ["", "10.03.2024", "2024-13-01", "2024-02-30", "yesterday"])
    def test_invalid_dates_raise(self, value: str) -> None:
        """Anything that is not a real YYYY-MM-DD date raises ValueError."""
        with pytest.raises(ValueError):
            parse_iso_day(value)

    def test_day_bounds_are_half_open(self) -> None:
        """The end bound is exactly one day after the start."""
        start, end = day_bounds("2024-03-10")
        assert start == MARCH_10
        assert end == MARCH_10 + SECONDS_PER_DAY


class TestWeekday:
    """Tests for the Sunday-first weekday numbering."""

    def test_sunday_is_zero(self) -> None:
        assert weekday_sunday_first(MARCH_10) == 0

    def test_monday_is_one(self) -> None:
        assert weekday_sunday_first(MARCH_10 + SECONDS_PER_DAY) == 1

    def test_saturday_is_six(self) -> None:
        assert weekday_sunday_first(MARCH_10 - 1) == 6


class TestFormatTimestamp:
    """Tests for log formatting of timestamps."""

    def test_unknown_dates(self) -> None:
        """Zero and negative values are reported as unknown."""
        assert format_timestamp(0) == "unknown"
        assert format_timestamp(-1.0) == "unknown"

    def test_iso_output(self) -> None:
        assert format_timestamp(MARCH_10) == "2024-03-10T00:00:00+00:00"


# ==================================================================
# Relative dates
# ==================================================================


class TestParseRelativeSpec:
    """Tests for '<n>:<unit>' parsing."""

    def test_valid_spec(self) -> None:
        assert parse_relative_spec("3:weeks") == (3, "weeks")

    def test_unit_is_case_insensitive(self) -> None:
        assert parse_relative_spec(" 12 : Months ") == (12, "months")

    @pytest.mark.parametrize("value", ["", "3", "x:days", "-1:days", "3:fortnights", "1:2:days", "1.5:days"])
    def test_invalid_specs_raise(self, value: str) -> None:
        """Malformed amounts, units and shapes raise ValueError."""
        with pytest.raises(ValueError):
            parse_relative_spec(value)


class TestRelativeCutoff:
    """Tests for cutoff computation."""

    def test_fixed_length_units(self) -> None:
        """Hours, days and weeks subtract a fixed duration."""
        assert relative_cutoff(MARCH_10, 6, "hours") == MARCH_10 - 6 * 3600
        assert relative_cutoff(MARCH_10, 2, "days") == MARCH_10 - 2 * SECONDS_PER_DAY
        assert relative_cutoff(MARCH_10, 1, "weeks") == MARCH_10 - 7 * SECONDS_PER_DAY

    def test_months_use_calendar_arithmetic(self) -> None:
        """2024-03-31 minus one month is the last day of February."""
        march_31 = 1711843200.0
        feb_29 = 1709164800.0
        assert relative_cutoff(march_31, 1, "months") == feb_29

    def test_years_clamp_leap_day(self) -> None:
        """2024-02-29 minus one year is 2023-02-28."""
        feb_29 = 1709164800.0
        feb_28_2023 = 1677542400.0
        assert relative_cutoff(feb_29, 1, "years") == feb_28_2023

    def test_zero_amount_is_now(self) -> None:
        assert relative_cutoff(MARCH_10, 0, "days") == MARCH_10

    def test_unknown_unit_raises(self) -> None:
        with pytest.raises(ValueError):
            relative_cutoff(MARCH_10, 1, "decades")

    @pytest.mark.parametrize(
        "amount,unit",
        [(5000, "years"), (30000, "months"), (10**12, "days"), (10**15, "hours")],
    )
    def test_cutoff_before_year_one_clamps(self, amount, unit) -> None:
        """Amounts reaching past year 1 clamp to the earliest instant."""
        assert relative_cutoff(MARCH_10, amount, unit) == EARLIEST_TIMESTAMP
