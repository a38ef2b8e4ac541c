"""
Service for timezone conversions and local calendar days.

Instants are stored as naive UTC. The calendar day of a timesheet is the
local day at its location (location timezone, falling back to the company
timezone, then to the configured default).
"""
from typing import Optional
from uuid import UUID
from datetime import datetime, date, timezone
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import pytz

from shiftboard.core.config import settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current instant as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC. Naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(pytz.UTC).replace(tzinfo=None)


def resolve_timezone(*candidates: Optional[str]) -> str:
    """First valid timezone name among the candidates, else the default."""
    for name in candidates:
        if not name:
            continue
        try:
            pytz.timezone(name)
            return name
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{name}', falling back")
    return settings.DEFAULT_TIMEZONE


async def get_location_timezone(
    db: AsyncSession,
    location_id: UUID,
) -> str:
    """Timezone of a location, falling back to its company's."""
    from shiftboard.models.company import Company
    from shiftboard.models.location import Location

    result = await db.execute(
        select(Location.timezone, Company.timezone)
        .join(Company, Company.id == Location.company_id)
        .where(Location.id == location_id)
    )
    row = result.first()
    if row is None:
        return settings.DEFAULT_TIMEZONE
    return resolve_timezone(row[0], row[1])


def convert_to_local(
    utc_datetime: Optional[datetime],
    timezone_str: str,
) -> Optional[datetime]:
    """Convert a UTC datetime to the given timezone. Returns None for None."""
    if utc_datetime is None:
        return None
    tz = pytz.timezone(resolve_timezone(timezone_str))
    if utc_datetime.tzinfo is None:
        utc_datetime = pytz.utc.localize(utc_datetime)
    return utc_datetime.astimezone(tz)


def local_date(
    utc_datetime: datetime,
    timezone_str: str,
) -> date:
    """Calendar day of an instant in the given timezone."""
    return convert_to_local(utc_datetime, timezone_str).date()


def local_today(timezone_str: str, now: Optional[datetime] = None) -> date:
    return local_date(now or utcnow(), timezone_str)
