"""
Shift Scheduling Service

Handles shift and day-off records: creation (single and bulk), week copying,
publishing, updates, deletion and open-shift claiming.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from sqlalchemy.exc import IntegrityError

from shiftboard.core.dates import day_offset, shift_date_by, week_range
from shiftboard.core.error_handling import ConflictError, NotFoundError, ValidationError
from shiftboard.core.query_builder import (
    apply_location_scope,
    delete_record,
    filter_by_date_range,
    get_paginated_results,
)
from shiftboard.models.location import Location
from shiftboard.models.position import Position
from shiftboard.models.shift import Shift, ShiftStatus, DayOffType
from shiftboard.models.user import User
from shiftboard.schemas.shift import ShiftCreate, ShiftUpdate
from shiftboard.services.access_service import (
    Capability,
    Principal,
    ensure_location_access,
    ensure_record_in_scope,
    has_capability,
    require_capability,
)
from shiftboard.services.location_service import get_location_for_action
from shiftboard.services.timezone_service import utcnow

logger = logging.getLogger(__name__)

# Fields carried over by copy_week; date is shifted and is_published reset.
COPIED_FIELDS = (
    "location_id",
    "user_id",
    "position_id",
    "start_time",
    "end_time",
    "break_minutes",
    "status",
    "notes",
    "is_open_shift",
    "is_day_off",
    "day_off_type",
    "is_paid",
)

# Columns a partial update may change but never clear.
NON_NULLABLE_UPDATE_FIELDS = ("date", "status", "is_open_shift", "is_published", "is_day_off", "is_paid")


def normalize_shift_fields(fields: dict) -> dict:
    """
    Enforce the day-off and open-shift rules on a complete set of shift fields.

    A day-off record drops position, times and break and is never open; it
    gets DAY_OFF when no type was given. A normal shift needs a position and
    both times, has no day-off type, and loses its worker when open.
    """
    if fields.get("is_day_off"):
        fields.update(
            position_id=None,
            start_time=None,
            end_time=None,
            break_minutes=0,
            is_open_shift=False,
        )
        fields["day_off_type"] = fields.get("day_off_type") or DayOffType.DAY_OFF
        return fields

    fields["day_off_type"] = None
    if fields.get("position_id") is None:
        raise ValidationError("position_id is required for a shift")
    if fields.get("start_time") is None or fields.get("end_time") is None:
        raise ValidationError("start_time and end_time are required for a shift")
    if fields.get("break_minutes") is None:
        fields["break_minutes"] = 0
    if fields.get("is_open_shift"):
        fields["user_id"] = None
    return fields


def _draft_fields(data: ShiftCreate) -> dict:
    fields = data.model_dump()
    if fields.get("status") is None:
        fields["status"] = ShiftStatus.SCHEDULED
    if fields.get("is_paid") is None:
        fields["is_paid"] = True
    return normalize_shift_fields(fields)


async def _validate_references(db: AsyncSession, principal: Principal, fields: dict) -> None:
    """Worker and position, when set, must belong to the caller's company."""
    user_id = fields.get("user_id")
    if user_id is not None:
        result = await db.execute(
            select(User.id).where(
                User.id == user_id,
                User.company_id == principal.company_id,
                User.is_active.is_(True),
            )
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError(f"User {user_id} not found")

    position_id = fields.get("position_id")
    if position_id is not None:
        result = await db.execute(
            select(Position.id).where(
                Position.id == position_id,
                Position.company_id == principal.company_id,
            )
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError(f"Position {position_id} not found")


async def _load_shift(db: AsyncSession, principal: Principal, shift_id: UUID) -> Shift:
    result = await db.execute(
        select(Shift, Location.company_id)
        .join(Location, Location.id == Shift.location_id)
        .where(Shift.id == shift_id)
    )
    row = result.first()
    if row is None or row[1] != principal.company_id:
        raise NotFoundError("Shift not found")
    return row[0]


async def get_shift(db: AsyncSession, principal: Principal, shift_id: UUID) -> Shift:
    """Fetch one shift. Out-of-scope and hidden drafts are reported as missing."""
    shift = await _load_shift(db, principal, shift_id)
    ensure_record_in_scope(principal, shift.location_id, "Shift")
    if not shift.is_published and not has_capability(principal, Capability.VIEW_DRAFT_SHIFTS):
        raise NotFoundError("Shift not found")
    return shift


async def list_shifts(
    db: AsyncSession,
    principal: Principal,
    location_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[ShiftStatus] = None,
    is_published: Optional[bool] = None,
    is_open_shift: Optional[bool] = None,
    skip: int = 0,
    limit: int = 500,
) -> Tuple[List[Shift], int]:
    """List shifts matching the filters, ANDed with the caller's scope."""
    query = select(Shift)
    query = apply_location_scope(query, Shift.location_id, principal)

    if location_id is not None:
        ensure_location_access(principal, location_id)
        query = query.where(Shift.location_id == location_id)
    if user_id is not None:
        query = query.where(Shift.user_id == user_id)
    if status is not None:
        query = query.where(Shift.status == status)
    if is_open_shift is not None:
        query = query.where(Shift.is_open_shift.is_(is_open_shift))

    # Workers only ever see the published schedule
    if not has_capability(principal, Capability.VIEW_DRAFT_SHIFTS):
        is_published = True
    if is_published is not None:
        query = query.where(Shift.is_published.is_(is_published))

    query = filter_by_date_range(query, Shift, "date", start_date, end_date)

    return await get_paginated_results(
        db,
        query,
        skip=skip,
        limit=limit,
        order_by=[Shift.date, Shift.start_time],
    )


async def create_shift(
    db: AsyncSession,
    principal: Principal,
    data: ShiftCreate,
) -> Shift:
    """Create a single shift or day-off record."""
    require_capability(principal, Capability.MANAGE_SHIFTS)
    await get_location_for_action(db, principal, data.location_id)

    fields = _draft_fields(data)
    await _validate_references(db, principal, fields)

    shift = Shift(**fields, created_by=principal.id)
    db.add(shift)
    await db.commit()
    await db.refresh(shift)

    logger.info(f"Shift {shift.id} created at location {shift.location_id} for {shift.date}")
    return shift


async def bulk_create_shifts(
    db: AsyncSession,
    principal: Principal,
    drafts: List[ShiftCreate],
) -> List[Shift]:
    """
    Create many shifts in one transaction.

    Every draft is validated before anything is written; any failure rolls
    back the whole batch.
    """
    require_capability(principal, Capability.PLAN_SCHEDULE)
    if not drafts:
        raise ValidationError("At least one shift is required")

    checked_locations = set()
    shifts = []
    for index, data in enumerate(drafts):
        if data.location_id not in checked_locations:
            await get_location_for_action(db, principal, data.location_id)
            checked_locations.add(data.location_id)
        try:
            fields = _draft_fields(data)
            await _validate_references(db, principal, fields)
        except ValidationError as e:
            raise ValidationError(f"Shift {index + 1}: {e.message}")
        shifts.append(Shift(**fields, created_by=principal.id))

    try:
        db.add_all(shifts)
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Bulk shift creation rolled back: {e.orig}")
        raise ConflictError("Bulk shift creation failed; no shifts were created")
    except Exception:
        await db.rollback()
        raise

    for shift in shifts:
        await db.refresh(shift)

    logger.info(f"Bulk created {len(shifts)} shifts")
    return shifts


async def copy_week(
    db: AsyncSession,
    principal: Principal,
    location_id: UUID,
    source_week_start: date,
    target_week_start: date,
) -> List[Shift]:
    """Duplicate a location's week of shifts as drafts in another week."""
    require_capability(principal, Capability.PLAN_SCHEDULE)
    await get_location_for_action(db, principal, location_id)

    offset = day_offset(source_week_start, target_week_start)
    if offset == 0:
        raise ValidationError("Source and target weeks must differ")

    source_start, source_end = week_range(source_week_start)
    result = await db.execute(
        select(Shift)
        .where(
            and_(
                Shift.location_id == location_id,
                Shift.date >= source_start,
                Shift.date <= source_end,
            )
        )
        .order_by(Shift.date, Shift.start_time)
    )
    source_shifts = result.scalars().all()
    if not source_shifts:
        raise ConflictError("No shifts found in the source week")

    copies = []
    for source in source_shifts:
        fields = {name: getattr(source, name) for name in COPIED_FIELDS}
        copies.append(
            Shift(
                **fields,
                date=shift_date_by(source.date, offset),
                is_published=False,
                created_by=principal.id,
            )
        )

    try:
        db.add_all(copies)
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Copy week rolled back: {e.orig}")
        raise ConflictError("Copying the week failed; no shifts were created")
    except Exception:
        await db.rollback()
        raise

    for shift in copies:
        await db.refresh(shift)

    logger.info(
        f"Copied {len(copies)} shifts at location {location_id} "
        f"from week {source_week_start} to {target_week_start}"
    )
    return copies


async def publish_shifts(
    db: AsyncSession,
    principal: Principal,
    location_id: UUID,
    start_date: date,
    end_date: date,
) -> int:
    """Publish the drafts of a date range. Returns how many were flipped."""
    require_capability(principal, Capability.PLAN_SCHEDULE)
    await get_location_for_action(db, principal, location_id)
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    result = await db.execute(
        update(Shift)
        .where(
            Shift.location_id == location_id,
            Shift.date >= start_date,
            Shift.date <= end_date,
            Shift.is_published.is_(False),
        )
        .values(is_published=True, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()

    count = result.rowcount or 0
    logger.info(f"Published {count} shifts at location {location_id} for {start_date}..{end_date}")
    return count


async def update_shift(
    db: AsyncSession,
    principal: Principal,
    shift_id: UUID,
    data: ShiftUpdate,
) -> Shift:
    """Apply a partial update, re-applying the day-off and open-shift rules."""
    require_capability(principal, Capability.MANAGE_SHIFTS)
    shift = await get_shift(db, principal, shift_id)

    changes = data.model_dump(exclude_unset=True)
    if not changes:
        return shift
    cleared = sorted(name for name in NON_NULLABLE_UPDATE_FIELDS if name in changes and changes[name] is None)
    if cleared:
        raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")

    fields = {name: getattr(shift, name) for name in COPIED_FIELDS}
    fields["date"] = shift.date
    fields["is_published"] = shift.is_published
    fields.update(changes)

    # Assigning a worker takes the shift off the open board
    if changes.get("user_id") is not None and "is_open_shift" not in changes:
        fields["is_open_shift"] = False

    fields = normalize_shift_fields(fields)
    if "user_id" in changes or "position_id" in changes:
        await _validate_references(db, principal, fields)

    for name, value in fields.items():
        if name == "location_id":
            continue
        setattr(shift, name, value)

    await db.commit()
    await db.refresh(shift)

    logger.info(f"Shift {shift.id} updated: {sorted(changes)}")
    return shift


async def try_claim(db: AsyncSession, shift_id: UUID, user_id: UUID) -> bool:
    """
    Assign an open shift to a worker with a conditional update.

    Returns False when another claim got there first. The caller commits.
    """
    result = await db.execute(
        update(Shift)
        .where(
            Shift.id == shift_id,
            Shift.user_id.is_(None),
            Shift.is_open_shift.is_(True),
        )
        .values(
            user_id=user_id,
            is_open_shift=False,
            status=ShiftStatus.CONFIRMED,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


async def claim_shift(db: AsyncSession, principal: Principal, shift_id: UUID) -> Shift:
    """Claim an open shift for the calling worker."""
    require_capability(principal, Capability.CLAIM_SHIFTS)
    shift = await _load_shift(db, principal, shift_id)
    if not shift.is_published and not has_capability(principal, Capability.VIEW_DRAFT_SHIFTS):
        raise NotFoundError("Shift not found")

    await get_location_for_action(db, principal, shift.location_id, require_active=True)
    if not shift.is_open_shift:
        raise ConflictError("This is not an open shift")
    if shift.user_id is not None:
        raise ConflictError("Shift has already been taken")

    if not await try_claim(db, shift.id, principal.id):
        await db.rollback()
        logger.warning(f"Claim of shift {shift.id} by {principal.id} lost the race")
        raise ConflictError("Shift has already been taken")

    await db.commit()
    await db.refresh(shift)

    logger.info(f"Shift {shift.id} claimed by {principal.id}")
    return shift


async def delete_shift(db: AsyncSession, principal: Principal, shift_id: UUID) -> None:
    """Remove a shift for good; no history is kept."""
    require_capability(principal, Capability.MANAGE_SHIFTS)
    shift = await get_shift(db, principal, shift_id)
    await delete_record(db, shift)
    await db.commit()
    logger.info(f"Shift {shift_id} deleted")


async def cancel_shifts_for_user(
    db: AsyncSession,
    user_id: UUID,
    start_date: date,
    end_date: date,
) -> int:
    """Cancel every shift of one worker dated inside the inclusive range. The caller commits."""
    result = await db.execute(
        update(Shift)
        .where(
            Shift.user_id == user_id,
            Shift.date >= start_date,
            Shift.date <= end_date,
            Shift.status != ShiftStatus.CANCELLED,
        )
        .values(status=ShiftStatus.CANCELLED, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


async def set_shift_status(db: AsyncSession, shift_id: UUID, status: ShiftStatus) -> None:
    """Move a linked shift along with its timesheet. The caller commits."""
    await db.execute(
        update(Shift)
        .where(Shift.id == shift_id)
        .values(status=status, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
