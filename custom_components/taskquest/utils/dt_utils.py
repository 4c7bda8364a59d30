# File: utils/dt_utils.py
"""Date and time utilities for TaskQuest.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

NO `homeassistant.*` imports allowed. Uses standard library: datetime,
zoneinfo, plus dateutil for calendar-month arithmetic.

Everything that compares days in the engines goes through `to_calendar_day`,
so "same day" always means "same local calendar day" in DEFAULT_TIME_ZONE.

Functions:
    - set_default_timezone: Configure local timezone
    - dt_today_local: Get today's date in local timezone
    - dt_now_utc: Current UTC datetime
    - as_utc / as_local: Timezone conversion
    - dt_parse_date / dt_parse: Normalize string/date/datetime inputs
    - to_calendar_day: Reduce any input to a local calendar date
    - days_between: Whole calendar days between two dates
    - local_midnight_iso: ISO timestamp of local midnight for a date
    - weekday_sunday_first: Weekday index with 0=Sunday .. 6=Saturday
    - dt_add_interval: Add hours/days/weeks/months to a datetime
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

if TYPE_CHECKING:
    from datetime import tzinfo

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Time unit constants
TIME_UNIT_HOURS = "hours"
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"
TIME_UNIT_MONTHS = "months"

DAYS_PER_WEEK = 7


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in DEFAULT_TIME_ZONE.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be in UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts "2025-04-07" (ISO) and the "%m/%d/%Y" / "%Y/%m/%d" forms.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: tzinfo | None = None,
) -> datetime | None:
    """Normalize string, date or datetime input to an aware datetime.

    Naive results get `default_tzinfo` (DEFAULT_TIME_ZONE if None). Plain
    dates become local midnight of that date.

    Example:
        >>> dt_parse("2025-04-15")
        datetime.datetime(2025, 4, 15, 0, 0, tzinfo=ZoneInfo('America/New_York'))
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            parsed_date = dt_parse_date(dt_input)
            if parsed_date is None:
                return None
            result = datetime.combine(parsed_date, datetime.min.time())
    elif isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)

    return result


# ==============================================================================
# Calendar Day Helpers
# ==============================================================================


def to_calendar_day(
    value: str | date | datetime, tz: ZoneInfo | None = None
) -> date:
    """Reduce a timestamp or date to its local calendar day.

    Plain `date` objects are already calendar days and pass through. Aware
    datetimes are converted to local time first, naive ones are taken as
    local wall-clock time.

    Raises:
        ValueError: If a string cannot be parsed.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    tz_info = tz or DEFAULT_TIME_ZONE
    parsed = dt_parse(value, default_tzinfo=tz_info)
    if parsed is None:
        raise ValueError(f"Unparseable date value: {value!r}")
    return parsed.astimezone(tz_info).date()


def days_between(start: date, end: date) -> int:
    """Return the signed number of calendar days from `start` to `end`."""
    return (end - start).days


def local_midnight_iso(day: date, tz: ZoneInfo | None = None) -> str:
    """Return the ISO timestamp of local midnight for a calendar day.

    Example:
        local_midnight_iso(date(2025, 3, 4)) → "2025-03-04T00:00:00+00:00"
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.combine(day, datetime.min.time(), tzinfo=tz_info).isoformat()


def weekday_sunday_first(day: date) -> int:
    """Return the weekday of `day` with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % DAYS_PER_WEEK


def start_of_week_sunday(day: date) -> date:
    """Return the Sunday on or before `day`."""
    return day - timedelta(days=weekday_sunday_first(day))


# ==============================================================================
# Interval Arithmetic
# ==============================================================================


def dt_add_interval(
    base_dt: datetime,
    interval_unit: str,
    delta: int,
) -> datetime | None:
    """Add a number of time units to a datetime.

    Hours are elapsed time. Days, weeks and months are added to the local
    wall clock in DEFAULT_TIME_ZONE, so 08:00 stays 08:00 across a DST change.
    Months use calendar arithmetic, so Jan 31 + 1 month is the last day of
    February rather than a date in March.

    Args:
        base_dt: Base datetime
        interval_unit: One of the TIME_UNIT_* constants
        delta: Number of units to add

    Returns:
        New local datetime, or None for an unknown unit or an overflow
    """
    try:
        if interval_unit == TIME_UNIT_HOURS:
            return as_local(as_utc(base_dt) + timedelta(hours=delta))
        if interval_unit == TIME_UNIT_DAYS:
            return as_local(base_dt) + timedelta(days=delta)
        if interval_unit == TIME_UNIT_WEEKS:
            return as_local(base_dt) + timedelta(weeks=delta)
        if interval_unit == TIME_UNIT_MONTHS:
            return as_local(base_dt) + relativedelta(months=delta)
    except (ValueError, OverflowError) as exc:
        _LOGGER.error("Error adding interval: %s", exc)
        return None

    _LOGGER.warning("Unknown interval_unit: %s", interval_unit)
    return None
