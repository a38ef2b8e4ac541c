"""
Kiosk timeclock: a shared device at one location, reached through the
location's kiosk token. Workers identify themselves and, when they have one,
enter their PIN before every action.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.config import settings
from shiftboard.core.error_handling import AuthorizationError, NotFoundError
from shiftboard.core.security import verify_pin
from shiftboard.models.location import Location
from shiftboard.models.timesheet import Timesheet, TimesheetSource, ClockStatus
from shiftboard.models.user import User, UserLocation
from shiftboard.services import timeclock_service
from shiftboard.services.timeclock_service import SessionScope
from shiftboard.services.timesheet_service import check_shift_for_clock_in
from shiftboard.services.timezone_service import get_location_timezone, local_date, to_naive_utc, utcnow

logger = logging.getLogger(__name__)


async def get_location_by_token(db: AsyncSession, token: str) -> Location:
    """Active location owning the kiosk token."""
    if not token:
        raise NotFoundError("Kiosk not found")
    result = await db.execute(
        select(Location).where(
            Location.kiosk_token == token,
            Location.is_active.is_(True),
        )
    )
    location = result.scalar_one_or_none()
    if location is None:
        raise NotFoundError("Kiosk not found")
    return location


async def list_kiosk_employees(db: AsyncSession, location: Location) -> List[Tuple[User, bool]]:
    """Active workers assigned to the location, each with a has-PIN flag."""
    result = await db.execute(
        select(User)
        .join(UserLocation, UserLocation.user_id == User.id)
        .where(
            UserLocation.location_id == location.id,
            User.company_id == location.company_id,
            User.is_active.is_(True),
        )
        .order_by(User.first_name, User.last_name)
    )
    return [(user, bool(user.pin_hash)) for user in result.scalars().all()]


async def _get_employee(db: AsyncSession, location: Location, employee_id: UUID) -> User:
    result = await db.execute(
        select(User)
        .join(UserLocation, UserLocation.user_id == User.id)
        .where(
            User.id == employee_id,
            UserLocation.location_id == location.id,
            User.is_active.is_(True),
        )
    )
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def verify_employee_pin(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    pin: Optional[str],
) -> User:
    """
    Check a worker's PIN at the kiosk.

    A worker without a PIN passes. Otherwise the PIN must match exactly.
    """
    employee = await _get_employee(db, location, employee_id)
    if not employee.pin_hash:
        return employee
    if not pin or not verify_pin(pin, employee.pin_hash):
        logger.warning(f"Kiosk PIN mismatch for employee {employee.id} at location {location.id}")
        raise AuthorizationError("Invalid PIN", status_code=status.HTTP_401_UNAUTHORIZED)
    return employee


async def _kiosk_scope(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    now: datetime,
) -> SessionScope:
    tz_name = await get_location_timezone(db, location.id)
    return SessionScope(
        user_id=employee_id,
        location_id=location.id,
        work_date=local_date(now, tz_name),
    )


async def kiosk_status(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    now: Optional[datetime] = None,
) -> Tuple[ClockStatus, Optional[Timesheet]]:
    """Status from the day's most recent timesheet at this location."""
    now = to_naive_utc(now) or utcnow()
    await _get_employee(db, location, employee_id)
    scope = await _kiosk_scope(db, location, employee_id, now)
    latest = await timeclock_service.find_latest_timesheet(db, scope)
    return timeclock_service.derive_status(latest), latest


async def kiosk_clock_in(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    pin: Optional[str] = None,
    shift_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    employee = await verify_employee_pin(db, location, employee_id, pin)
    if shift_id is not None:
        await check_shift_for_clock_in(db, shift_id, employee.id, location.id)

    scope = await _kiosk_scope(db, location, employee.id, now)
    return await timeclock_service.open_session(
        db,
        scope,
        location_id=location.id,
        work_date=scope.work_date,
        shift_id=shift_id,
        source=TimesheetSource.KIOSK,
        now=now,
    )


async def kiosk_clock_out(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    pin: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    employee = await verify_employee_pin(db, location, employee_id, pin)
    scope = await _kiosk_scope(db, location, employee.id, now)
    return await timeclock_service.close_session(db, scope, now=now)


async def kiosk_start_break(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    pin: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    employee = await verify_employee_pin(db, location, employee_id, pin)
    scope = await _kiosk_scope(db, location, employee.id, now)
    return await timeclock_service.start_break(db, scope, now=now)


async def kiosk_end_break(
    db: AsyncSession,
    location: Location,
    employee_id: UUID,
    pin: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    employee = await verify_employee_pin(db, location, employee_id, pin)
    scope = await _kiosk_scope(db, location, employee.id, now)
    return await timeclock_service.end_break(db, scope, now=now)


async def todays_records(
    db: AsyncSession,
    location: Location,
    today: Optional[date] = None,
) -> List[Tuple[Timesheet, User]]:
    """Latest timesheets of the location's current local day."""
    if today is None:
        tz_name = await get_location_timezone(db, location.id)
        today = local_date(utcnow(), tz_name)

    result = await db.execute(
        select(Timesheet, User)
        .join(User, User.id == Timesheet.user_id)
        .where(
            Timesheet.location_id == location.id,
            Timesheet.date == today,
        )
        .order_by(Timesheet.clock_in.desc())
        .limit(settings.KIOSK_TODAY_LIMIT)
    )
    return [(row[0], row[1]) for row in result.all()]
