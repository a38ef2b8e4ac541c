"""
Clock-in / break / clock-out state machine shared by self-service and kiosk.

A ``SessionScope`` decides which open session a worker may hold:

* self-service: one open session per worker, whatever the location
* kiosk: one open session per worker, location and local calendar day

The scope key is written to ``Timesheet.session_key`` while the session is
open. The column is unique, so a concurrent second clock-in for the same
scope fails at commit.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.error_handling import ConflictError
from shiftboard.models.shift import ShiftStatus
from shiftboard.models.timesheet import Timesheet, TimesheetStatus, TimesheetSource, ClockStatus
from shiftboard.services.shift_service import set_shift_status
from shiftboard.services.timezone_service import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionScope:
    user_id: UUID
    location_id: Optional[UUID] = None
    work_date: Optional[date] = None

    @property
    def is_kiosk(self) -> bool:
        return self.location_id is not None

    @property
    def key(self) -> str:
        if not self.is_kiosk:
            return f"user:{self.user_id}"
        return f"kiosk:{self.user_id}:{self.location_id}:{self.work_date.isoformat()}"

    def apply(self, query):
        query = query.where(Timesheet.user_id == self.user_id)
        if self.is_kiosk:
            query = query.where(
                Timesheet.location_id == self.location_id,
                Timesheet.date == self.work_date,
            )
        return query


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, never negative."""
    seconds = (to_naive_utc(end) - to_naive_utc(start)).total_seconds()
    return max(0, int(seconds // 60))


def compute_total_minutes(clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> int:
    """Worked minutes of a session: elapsed time less every break."""
    return max(0, elapsed_minutes(clock_in, clock_out) - (break_minutes or 0))


def is_on_break(timesheet: Timesheet) -> bool:
    return timesheet.break_start is not None and timesheet.break_end is None


def derive_status(timesheet: Optional[Timesheet]) -> ClockStatus:
    if timesheet is None or timesheet.clock_out is not None:
        return ClockStatus.NOT_CLOCKED_IN
    if is_on_break(timesheet):
        return ClockStatus.ON_BREAK
    return ClockStatus.CLOCKED_IN


async def find_open_timesheet(db: AsyncSession, scope: SessionScope) -> Optional[Timesheet]:
    query = scope.apply(select(Timesheet)).where(Timesheet.clock_out.is_(None))
    result = await db.execute(query.order_by(Timesheet.clock_in.desc()).limit(1))
    return result.scalar_one_or_none()


async def find_latest_timesheet(db: AsyncSession, scope: SessionScope) -> Optional[Timesheet]:
    """Most recent timesheet of the scope, open or closed."""
    query = scope.apply(select(Timesheet))
    result = await db.execute(query.order_by(Timesheet.clock_in.desc()).limit(1))
    return result.scalar_one_or_none()


async def _require_open(db: AsyncSession, scope: SessionScope) -> Timesheet:
    timesheet = await find_open_timesheet(db, scope)
    if timesheet is None:
        raise ConflictError("Not clocked in")
    return timesheet


async def open_session(
    db: AsyncSession,
    scope: SessionScope,
    location_id: UUID,
    work_date: date,
    shift_id: Optional[UUID] = None,
    source: TimesheetSource = TimesheetSource.WEB,
    now: Optional[datetime] = None,
) -> Timesheet:
    """Clock in: create a PENDING timesheet and start the linked shift."""
    now = to_naive_utc(now) or utcnow()

    if await find_open_timesheet(db, scope) is not None:
        logger.warning(f"Duplicate clock-in rejected for {scope.key}")
        raise ConflictError("Already clocked in")

    timesheet = Timesheet(
        user_id=scope.user_id,
        location_id=location_id,
        shift_id=shift_id,
        date=work_date,
        clock_in=now,
        status=TimesheetStatus.PENDING,
        source=source,
        break_minutes=0,
        session_key=scope.key,
    )
    db.add(timesheet)
    if shift_id is not None:
        await set_shift_status(db, shift_id, ShiftStatus.IN_PROGRESS)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Concurrent clock-in rejected for {scope.key}")
        raise ConflictError("Already clocked in")
    await db.refresh(timesheet)

    logger.info(f"Clock-in {timesheet.id} for {scope.key} at location {location_id}")
    return timesheet


async def start_break(
    db: AsyncSession,
    scope: SessionScope,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    timesheet = await _require_open(db, scope)
    if is_on_break(timesheet):
        raise ConflictError("Break already in progress")

    timesheet.break_start = now
    timesheet.break_end = None
    await db.commit()
    await db.refresh(timesheet)

    logger.info(f"Break started on timesheet {timesheet.id}")
    return timesheet


def _finish_break(timesheet: Timesheet, now: datetime) -> None:
    timesheet.break_end = now
    timesheet.break_minutes = (timesheet.break_minutes or 0) + elapsed_minutes(timesheet.break_start, now)


async def end_break(
    db: AsyncSession,
    scope: SessionScope,
    now: Optional[datetime] = None,
) -> Timesheet:
    now = to_naive_utc(now) or utcnow()
    timesheet = await _require_open(db, scope)
    if not is_on_break(timesheet):
        raise ConflictError("No break in progress")

    _finish_break(timesheet, now)
    await db.commit()
    await db.refresh(timesheet)

    logger.info(f"Break ended on timesheet {timesheet.id} ({timesheet.break_minutes} break minutes)")
    return timesheet


async def close_session(
    db: AsyncSession,
    scope: SessionScope,
    now: Optional[datetime] = None,
) -> Timesheet:
    """Clock out: close any open break, total the session and submit it."""
    now = to_naive_utc(now) or utcnow()
    timesheet = await _require_open(db, scope)

    if is_on_break(timesheet):
        _finish_break(timesheet, now)

    timesheet.clock_out = now
    timesheet.total_minutes = compute_total_minutes(timesheet.clock_in, now, timesheet.break_minutes)
    timesheet.status = TimesheetStatus.SUBMITTED
    timesheet.session_key = None
    if timesheet.shift_id is not None:
        await set_shift_status(db, timesheet.shift_id, ShiftStatus.COMPLETED)

    await db.commit()
    await db.refresh(timesheet)

    logger.info(f"Clock-out {timesheet.id} for {scope.key}: {timesheet.total_minutes} minutes")
    return timesheet
