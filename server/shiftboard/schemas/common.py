from typing import Any

from shiftboard.core.dates import parse_calendar_date


def strict_date(value: Any) -> Any:
    """Before-validator for calendar dates: only ``YYYY-MM-DD`` strings or dates."""
    if value is None:
        return value
    return parse_calendar_date(value)
