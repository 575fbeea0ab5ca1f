# smartlists/utils/date_utils.py

"""Date helpers for rule targets and epoch-second record values.

Record dates are stored as Unix seconds (UTC). Rule targets come in three
shapes handled here:
    Absolute:  "2024-03-10"   -> a UTC calendar day
    Relative:  "3:months"     -> a cutoff measured back from "now"
    Weekday:   "0" .. "6"     -> 0 is Sunday, 6 is Saturday

Month and year offsets use calendar arithmetic via ``dateutil.relativedelta``
so "1:months" from March 31st lands on the last day of February.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

__all__ = [
    "EARLIEST_TIMESTAMP",
    "RELATIVE_UNITS",
    "SECONDS_PER_DAY",
    "day_bounds",
    "format_timestamp",
    "parse_iso_day",
    "parse_relative_spec",
    "relative_cutoff",
    "weekday_sunday_first",
]

SECONDS_PER_DAY = 86400

RELATIVE_UNITS: tuple[str, ...] = ("hours", "days", "weeks", "months", "years")

# 0001-01-01T00:00:00Z
EARLIEST_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc).timestamp()


# ---------------------------------------------------------------------------
# Absolute dates
# ---------------------------------------------------------------------------


def parse_iso_day(value: str) -> datetime:
    """Parses a ``YYYY-MM-DD`` string as midnight UTC.

    Args:
        value: The date string.

    Returns:
        A timezone-aware datetime at 00:00:00 UTC.

    Raises:
        ValueError: If the string is not a valid ``YYYY-MM-DD`` date.
    """
    text = (value or "").strip()
    parsed = datetime.strptime(text, "%Y-%m-%d")
    return parsed.replace(tzinfo=timezone.utc)


def day_bounds(value: str) -> tuple[float, float]:
    """Returns the half-open ``[start, end)`` epoch range for a UTC day.

    Args:
        value: A ``YYYY-MM-DD`` date string.

    Returns:
        Tuple of (start, end) in Unix seconds; end is exactly one day later.
    """
    start = parse_iso_day(value).timestamp()
    return start, start + SECONDS_PER_DAY


def weekday_sunday_first(timestamp: float) -> int:
    """Returns the UTC day of week for a Unix timestamp with Sunday as 0."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    # datetime.weekday() is Monday=0 .. Sunday=6
    return (moment.weekday() + 1) % 7


def format_timestamp(timestamp: float) -> str:
    """Formats a Unix timestamp as an ISO-8601 UTC string for log output."""
    if timestamp <= 0:
        return "unknown"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Relative dates
# ---------------------------------------------------------------------------


def parse_relative_spec(value: str) -> tuple[int, str]:
    """Parses a relative date specification such as ``"3:weeks"``.

    Args:
        value: String of the form ``<n>:<unit>``.

    Returns:
        Tuple of (amount, unit) with the unit lower-cased.

    Raises:
        ValueError: If the amount is not a non-negative integer or the unit
            is not one of hours, days, weeks, months, years.
    """
    parts = (value or "").split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid relative date '{value}': expected '<number>:<unit>'")

    amount_text = parts[0].strip()
    unit = parts[1].strip().lower()

    if not amount_text.isdigit():
        raise ValueError(f"Invalid relative date '{value}': '{amount_text}' is not a non-negative integer")
    if unit not in RELATIVE_UNITS:
        raise ValueError(f"Invalid relative date '{value}': unknown unit '{unit}' (expected {', '.join(RELATIVE_UNITS)})")

    return int(amount_text), unit


def relative_cutoff(now: float, amount: int, unit: str) -> float:
    """Computes the epoch cutoff ``amount`` units before ``now``.

    Amounts reaching past year 1 clamp to ``EARLIEST_TIMESTAMP``.

    Args:
        now: Reference time in Unix seconds.
        amount: Number of units to go back.
        unit: One of ``RELATIVE_UNITS``.

    Returns:
        The cutoff in Unix seconds.

    Raises:
        ValueError: If the unit is unknown.
    """
    if unit not in RELATIVE_UNITS:
        raise ValueError(f"Unknown relative date unit: {unit}")

    moment = datetime.fromtimestamp(now, tz=timezone.utc)
    try:
        if unit == "hours":
            cutoff = moment - timedelta(hours=amount)
        elif unit == "days":
            cutoff = moment - timedelta(days=amount)
        elif unit == "weeks":
            cutoff = moment - timedelta(weeks=amount)
        elif unit == "months":
            cutoff = moment - relativedelta(months=amount)
        else:
            cutoff = moment - relativedelta(years=amount)
    except (OverflowError, ValueError):
        return EARLIEST_TIMESTAMP
    return cutoff.timestamp()
