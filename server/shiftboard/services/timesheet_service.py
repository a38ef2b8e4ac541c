"""
Self-service timesheets: the authenticated worker clocks in and out for
themselves, and reviewers approve or reject submitted timesheets.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.error_handling import ConflictError, NotFoundError
from shiftboard.core.query_builder import apply_location_scope, filter_by_date_range, get_paginated_results
from shiftboard.models.location import Location
from shiftboard.models.shift import Shift
from shiftboard.models.timesheet import Timesheet, TimesheetStatus, TimesheetSource, ClockStatus
from shiftboard.services import timeclock_service
from shiftboard.services.access_service import (
    Capability,
    Principal,
    ensure_record_in_scope,
    has_capability,
    require_capability,
)
from shiftboard.services.location_service import get_location_for_action
from shiftboard.services.timeclock_service import SessionScope
from shiftboard.services.timezone_service import get_location_timezone, local_date, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES = (TimesheetStatus.PENDING, TimesheetStatus.SUBMITTED)


def _own_scope(principal: Principal) -> SessionScope:
    return SessionScope(user_id=principal.id)


async def check_shift_for_clock_in(
    db: AsyncSession,
    shift_id: UUID,
    user_id: UUID,
    location_id: UUID,
) -> Shift:
    """A linked shift must be at the clock-in location and not someone else's."""
    result = await db.execute(
        select(Shift).where(Shift.id == shift_id, Shift.location_id == location_id)
    )
    shift = result.scalar_one_or_none()
    if shift is None:
        raise NotFoundError("Shift not found")
    if shift.user_id is not None and shift.user_id != user_id:
        raise ConflictError("Shift is assigned to another worker")
    return shift


async def clock_in(
    db: AsyncSession,
    principal: Principal,
    location_id: UUID,
    shift_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> Timesheet:
    require_capability(principal, Capability.TRACK_OWN_TIME)
    location = await get_location_for_action(db, principal, location_id, require_active=True)
    if shift_id is not None:
        await check_shift_for_clock_in(db, shift_id, principal.id, location.id)

    now = to_naive_utc(now) or utcnow()
    tz_name = await get_location_timezone(db, location.id)

    return await timeclock_service.open_session(
        db,
        _own_scope(principal),
        location_id=location.id,
        work_date=local_date(now, tz_name),
        shift_id=shift_id,
        source=TimesheetSource.WEB,
        now=now,
    )


async def start_break(db: AsyncSession, principal: Principal, now: Optional[datetime] = None) -> Timesheet:
    require_capability(principal, Capability.TRACK_OWN_TIME)
    return await timeclock_service.start_break(db, _own_scope(principal), now=now)


async def end_break(db: AsyncSession, principal: Principal, now: Optional[datetime] = None) -> Timesheet:
    require_capability(principal, Capability.TRACK_OWN_TIME)
    return await timeclock_service.end_break(db, _own_scope(principal), now=now)


async def clock_out(db: AsyncSession, principal: Principal, now: Optional[datetime] = None) -> Timesheet:
    require_capability(principal, Capability.TRACK_OWN_TIME)
    return await timeclock_service.close_session(db, _own_scope(principal), now=now)


async def get_status(db: AsyncSession, principal: Principal) -> Tuple[ClockStatus, Optional[Timesheet]]:
    """Current clock status of the caller and the open timesheet, if any."""
    timesheet = await timeclock_service.find_open_timesheet(db, _own_scope(principal))
    return timeclock_service.derive_status(timesheet), timesheet


async def get_timesheet(db: AsyncSession, principal: Principal, timesheet_id: UUID) -> Timesheet:
    """Own timesheets are always visible; others need review rights and scope."""
    result = await db.execute(
        select(Timesheet, Location.company_id)
        .join(Location, Location.id == Timesheet.location_id)
        .where(Timesheet.id == timesheet_id)
    )
    row = result.first()
    if row is None or row[1] != principal.company_id:
        raise NotFoundError("Timesheet not found")

    timesheet = row[0]
    if timesheet.user_id == principal.id:
        return timesheet
    if not has_capability(principal, Capability.REVIEW_TIMESHEETS):
        raise NotFoundError("Timesheet not found")
    ensure_record_in_scope(principal, timesheet.location_id, "Timesheet")
    return timesheet


async def list_timesheets(
    db: AsyncSession,
    principal: Principal,
    location_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[TimesheetStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Timesheet], int]:
    """Timesheets matching the filters; workers only ever see their own."""
    query = select(Timesheet)
    query = apply_location_scope(query, Timesheet.location_id, principal)

    if not has_capability(principal, Capability.REVIEW_TIMESHEETS):
        user_id = principal.id
    if user_id is not None:
        query = query.where(Timesheet.user_id == user_id)
    if location_id is not None:
        query = query.where(Timesheet.location_id == location_id)
    if status is not None:
        query = query.where(Timesheet.status == status)
    query = filter_by_date_range(query, Timesheet, "date", start_date, end_date)

    return await get_paginated_results(
        db,
        query,
        skip=skip,
        limit=limit,
        order_by=[Timesheet.date.desc(), Timesheet.clock_in.desc()],
    )


async def _review(
    db: AsyncSession,
    principal: Principal,
    timesheet_id: UUID,
    new_status: TimesheetStatus,
    reason: Optional[str] = None,
) -> Timesheet:
    require_capability(principal, Capability.REVIEW_TIMESHEETS)
    timesheet = await get_timesheet(db, principal, timesheet_id)
    ensure_record_in_scope(principal, timesheet.location_id, "Timesheet")

    if timesheet.clock_out is None:
        raise ConflictError("Timesheet is still open")
    if timesheet.status not in REVIEWABLE_STATUSES:
        raise ConflictError(f"Timesheet is already {timesheet.status.value}")

    timesheet.status = new_status
    timesheet.approved_by = principal.id
    timesheet.approved_at = utcnow()
    if reason:
        timesheet.notes = reason
    await db.commit()
    await db.refresh(timesheet)

    logger.info(f"Timesheet {timesheet.id} {new_status.value} by {principal.id}")
    return timesheet


async def approve_timesheet(db: AsyncSession, principal: Principal, timesheet_id: UUID) -> Timesheet:
    return await _review(db, principal, timesheet_id, TimesheetStatus.APPROVED)


async def reject_timesheet(
    db: AsyncSession,
    principal: Principal,
    timesheet_id: UUID,
    reason: Optional[str] = None,
) -> Timesheet:
    return await _review(db, principal, timesheet_id, TimesheetStatus.REJECTED, reason=reason)
