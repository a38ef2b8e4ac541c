"""
Calendar date and time-of-day helpers.

A shift or timesheet ``date`` is a calendar day, never an instant. Dates are
stored in DATE columns and travel over the wire as ``YYYY-MM-DD`` strings;
times of day are stored without any date and compared on hour:minute only.
"""
import re
from datetime import date, time, timedelta
from typing import Optional, Tuple, Union

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")

MINUTES_PER_DAY = 24 * 60


def parse_calendar_date(value: Union[str, date]) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        ValueError: if the value does not match the pattern or is not a real day.
    """
    if isinstance(value, date):
        # datetime is a date subclass; keep only the calendar part
        return date(value.year, value.month, value.day)
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError(f"Invalid date format: {value!r} (expected YYYY-MM-DD)")
    year, month, day = (int(part) for part in value.split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}")


def parse_optional_date(value: Optional[Union[str, date]]) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_calendar_date(value)


def parse_time_of_day(value: Union[str, time]) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a naive time of day."""
    if isinstance(value, time):
        return value.replace(tzinfo=None, microsecond=0)
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)")
    hour, minute, second = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    try:
        return time(hour, minute, second)
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}")


def to_storage_date(value: date) -> str:
    """Wire/storage representation of a calendar date."""
    return value.isoformat()


def from_storage_date(value: Union[str, date]) -> date:
    return parse_calendar_date(value)


def minutes_between_times(start: time, end: time) -> int:
    """Minutes from ``start`` to ``end`` using hour:minute only.

    An end at or before the start crosses midnight.
    """
    start_minutes = start.hour * 60 + start.minute
    end_minutes = end.hour * 60 + end.minute
    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY
    return end_minutes - start_minutes


def shift_duration_minutes(start: Optional[time], end: Optional[time], break_minutes: int = 0) -> int:
    """Paid minutes of a shift; day-off records (no times) are zero."""
    if start is None or end is None:
        return 0
    return max(0, minutes_between_times(start, end) - (break_minutes or 0))


def day_offset(source: date, target: date) -> int:
    """Whole calendar days from ``source`` to ``target``."""
    return (target - source).days


def shift_date_by(value: date, days: int) -> date:
    return value + timedelta(days=days)


def week_range(week_start: date) -> Tuple[date, date]:
    """Inclusive range of the seven days starting at ``week_start``."""
    return week_start, week_start + timedelta(days=6)
