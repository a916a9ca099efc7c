# File: utils/dt_utils.py
"""Date and calendar utilities for TaskFlow.

Pure Python date functions shared by every engine. Tasks carry calendar dates
with no time component, so everything here works on ``datetime.date`` and
only touches ``datetime`` at the clock boundary.

Uses standard library datetime/zoneinfo plus dateutil for month arithmetic.

Functions:
    - set_default_timezone / get_default_timezone: Configure the local zone
    - dt_now_local: Current datetime in local timezone
    - dt_now_iso: Current datetime as ISO string
    - dt_today_local: Today's date in local timezone
    - dt_parse_date: Parse date strings
    - dt_to_local_date: Normalize a date/datetime/string to a local date
    - dt_days_in_month: Length of a month
    - dt_with_day_clamped: Pin day-of-month, clamped to month length
    - dt_with_month_clamped: Pin month, clamping the day
    - dt_add_interval: Add days/weeks/months/years to a date
    - weekday_name / weekday_index / normalize_weekday: Weekday name helpers
    - dt_next_weekday: Nearest future date falling on a weekday
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to keep utils free of package imports)
# These mirror const.py values.
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Time unit constants
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"
TIME_UNIT_MONTHS = "months"
TIME_UNIT_YEARS = "years"

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DAYS_PER_WEEK = 7


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo | str) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once when the task manager is configured.

    Args:
        tz: ZoneInfo object or IANA zone name (e.g. "Europe/Berlin")
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = ZoneInfo(tz) if isinstance(tz, str) else tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware).

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    return datetime.now(tz or DEFAULT_TIME_ZONE)


def dt_now_iso(tz: ZoneInfo | None = None) -> str:
    """Return the current local datetime as an ISO 8601 string.

    Example:
        "2025-04-07T14:30:00-05:00"
    """
    return dt_now_local(tz).isoformat()


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`."""
    return dt_now_local(tz).date()


# ==============================================================================
# Date Parsing
# ==============================================================================


def dt_parse_date(value: str | date | None) -> date | None:
    """Safely parse a calendar date.

    Accepts:
    - date / datetime objects (datetimes are truncated to their date)
    - "2025-04-07" (ISO format, the storage format)
    - "2025-04-07T10:00:00" (ISO datetime, time is dropped)
    - "04/07/2025" (US format)

    Args:
        value: Date string or object, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None


def dt_to_local_date(
    value: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Normalize a reference time to the local calendar date.

    Aware datetimes are converted to the local zone first so that a UTC
    timestamp late in the evening lands on the right local day. Naive
    datetimes are taken as already local.

    Example:
        datetime(2025, 4, 7, 23, 30, tzinfo=UTC) with tz=Asia/Tokyo
        → date(2025, 4, 8)
    """
    if value is None:
        return None

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return dt_parse_date(value)

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz or DEFAULT_TIME_ZONE).date()

    return value


# ==============================================================================
# Month Length Helpers
# ==============================================================================


def dt_days_in_month(year: int, month: int) -> int:
    """Return the number of days in a month (leap-year aware)."""
    return monthrange(year, month)[1]


def dt_with_day_clamped(value: date, day: int) -> date:
    """Pin the day-of-month, clamped to the month's last day.

    Example:
        dt_with_day_clamped(date(2025, 2, 10), 31) → date(2025, 2, 28)
    """
    last_day = dt_days_in_month(value.year, value.month)
    return value.replace(day=max(1, min(day, last_day)))


def dt_with_month_clamped(value: date, month: int) -> date:
    """Move a date to another month of the same year, clamping the day.

    Args:
        value: Source date
        month: Target month (1-12)

    Example:
        dt_with_month_clamped(date(2025, 1, 31), 4) → date(2025, 4, 30)
    """
    last_day = dt_days_in_month(value.year, month)
    return value.replace(month=month, day=min(value.day, last_day))


# ==============================================================================
# Interval Calculations
# ==============================================================================


def dt_add_interval(base_date: date, interval_unit: str, delta: int) -> date | None:
    """Add a number of days/weeks/months/years to a date.

    Month and year arithmetic goes through relativedelta, which clamps the
    day-of-month when it does not exist in the target month
    (Jan 31 + 1 month = Feb 28, or Feb 29 in a leap year).

    Args:
        base_date: Starting date
        interval_unit: One of the TIME_UNIT_* constants
        delta: Number of units to add (may be negative)

    Returns:
        The new date, or None for an unknown unit or an out-of-range result.
    """
    try:
        if interval_unit == TIME_UNIT_DAYS:
            return base_date + timedelta(days=delta)
        if interval_unit == TIME_UNIT_WEEKS:
            return base_date + timedelta(weeks=delta)
        if interval_unit == TIME_UNIT_MONTHS:
            return base_date + relativedelta(months=delta)
        if interval_unit == TIME_UNIT_YEARS:
            return base_date + relativedelta(years=delta)
    except (ValueError, OverflowError) as exc:
        _LOGGER.error("Error adding interval: %s", exc)
        return None

    _LOGGER.warning("Unknown interval_unit: %s", interval_unit)
    return None


# ==============================================================================
# Weekday Helpers
# ==============================================================================


def weekday_name(value: date) -> str:
    """Return the English weekday name of a date ("Monday".."Sunday")."""
    return WEEKDAY_NAMES[value.weekday()]


def weekday_index(name: str) -> int:
    """Return the weekday index (0=Monday, 6=Sunday) of a weekday name.

    Raises:
        ValueError: If the name is not a weekday
    """
    normalized = normalize_weekday(name)
    if normalized is None:
        raise ValueError(f"Not a weekday: {name!r}")
    return WEEKDAY_NAMES.index(normalized)


def normalize_weekday(value: object) -> str | None:
    """Normalize a weekday label to its canonical full name.

    Accepts full names and three-letter abbreviations in any case
    ("monday", "MON", "Mon" → "Monday"). Returns None for anything else.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    if len(candidate) < 3:
        return None
    for name in WEEKDAY_NAMES:
        lowered = name.lower()
        if candidate == lowered or candidate == lowered[:3]:
            return name
    return None


def dt_next_weekday(weekday: str, today: date) -> date | None:
    """Return the nearest date strictly after today that falls on a weekday.

    offset = (target - today) mod 7, and an offset of 0 becomes 7, so the
    result is never today itself.

    Example:
        dt_next_weekday("Thursday", date(2025, 4, 7))  # a Monday
        → date(2025, 4, 10)
    """
    try:
        target = weekday_index(weekday)
    except ValueError:
        _LOGGER.warning("dt_next_weekday: Unknown weekday %s", weekday)
        return None

    offset = (target - today.weekday()) % DAYS_PER_WEEK
    if offset == 0:
        offset = DAYS_PER_WEEK
    return today + timedelta(days=offset)
