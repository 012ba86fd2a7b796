# date_keys.py
# Description: Calendar date keys and display formatting helpers
#
# Imports
from datetime import date, datetime, timedelta, timezone
from typing import Optional
#
#######################################################################################################################
#
# Functions:

DATE_KEY_FORMAT = "%Y-%m-%d"


def format_date_key(value: date) -> str:
    """Format a date (or datetime) as a YYYY-MM-DD key, dropping any time component."""
    return value.strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> date:
    """
    Parse a YYYY-MM-DD key back into a date.

    Raises:
        ValueError: If the key is not a valid calendar date.
    """
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def is_date_key(key: str) -> bool:
    try:
        parse_date_key(key)
    except (TypeError, ValueError):
        return False
    return True


def today_key(today: Optional[date] = None) -> str:
    return format_date_key(today or date.today())


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def shift_date_key(key: str, days: int) -> str:
    """Return the key `days` away from `key` (negative goes back in time)."""
    return format_date_key(add_days(parse_date_key(key), days))


def relative_date_key(when: str, today: Optional[date] = None) -> str:
    """
    Resolve "today", "yesterday" or "tomorrow" to a date key.

    Raises:
        ValueError: For any other keyword.
    """
    offsets = {"yesterday": -1, "today": 0, "tomorrow": 1}
    if when not in offsets:
        raise ValueError(f"Unknown relative date: {when!r}")
    return format_date_key(add_days(today or date.today(), offsets[when]))


def format_display_date(key: str, today: Optional[date] = None) -> str:
    """Short label for a date key: "Today" for the current day, otherwise e.g. "Mon, Oct 19"."""
    if key == today_key(today):
        return "Today"
    value = parse_date_key(key)
    return f"{value:%a}, {value:%b} {value.day}"


def format_time(total_seconds: int) -> str:
    """Render a countdown as MM:SS (minutes are not wrapped into hours)."""
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

#
# End of date_keys.py
#######################################################################################################################
