"""
Dashboard rollups. Read-only; every number is computed fresh per call from
shifts, timesheets and time-off requests inside the caller's scope.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.config import settings
from shiftboard.core.error_handling import ValidationError
from shiftboard.models.company import Company
from shiftboard.models.location import Location
from shiftboard.models.position import Position
from shiftboard.models.shift import Shift, ShiftStatus
from shiftboard.models.time_off import TimeOffRequest, TimeOffStatus
from shiftboard.models.timesheet import Timesheet
from shiftboard.models.user import User, UserLocation, UserPosition
from shiftboard.services.access_service import (
    Capability,
    Principal,
    has_capability,
    require_capability,
    resolve_scope,
)
from shiftboard.services.location_service import get_location, list_locations
from shiftboard.services.timezone_service import local_today, resolve_timezone

logger = logging.getLogger(__name__)

OPEN_SHIFT_ALERT = "OPEN_SHIFT"
PENDING_REQUEST_ALERT = "PENDING_REQUEST"


async def company_today(db: AsyncSession, principal: Principal, now: Optional[datetime] = None) -> date:
    """Today's calendar day in the company's timezone."""
    result = await db.execute(select(Company.timezone).where(Company.id == principal.company_id))
    return local_today(resolve_timezone(result.scalar_one_or_none()), now)


async def _grouped_counts(db: AsyncSession, query) -> Dict[UUID, int]:
    result = await db.execute(query)
    return {row[0]: row[1] for row in result.all()}


async def get_overview(db: AsyncSession, principal: Principal, today: Optional[date] = None) -> dict:
    """Per-location counts for today plus company totals."""
    require_capability(principal, Capability.VIEW_DASHBOARD)
    today = today or await company_today(db, principal)
    tomorrow = today + timedelta(days=1)
    window_end = today + timedelta(days=settings.DASHBOARD_OPEN_SHIFT_WINDOW_DAYS)

    locations = await list_locations(db, principal)
    location_ids = [location.id for location in locations]

    employees = await _grouped_counts(
        db,
        select(UserLocation.location_id, func.count(distinct(UserLocation.user_id)))
        .join(User, User.id == UserLocation.user_id)
        .where(UserLocation.location_id.in_(location_ids), User.is_active.is_(True))
        .group_by(UserLocation.location_id),
    )
    today_shifts = await _grouped_counts(
        db,
        select(Shift.location_id, func.count(Shift.id))
        .where(
            Shift.location_id.in_(location_ids),
            Shift.date == today,
            Shift.is_day_off.is_(False),
            Shift.status != ShiftStatus.CANCELLED,
        )
        .group_by(Shift.location_id),
    )
    clocked_in = await _grouped_counts(
        db,
        select(Timesheet.location_id, func.count(distinct(Timesheet.user_id)))
        .where(
            Timesheet.location_id.in_(location_ids),
            Timesheet.date == today,
            Timesheet.clock_out.is_(None),
        )
        .group_by(Timesheet.location_id),
    )
    pending_requests = await _grouped_counts(
        db,
        select(UserLocation.location_id, func.count(distinct(TimeOffRequest.id)))
        .join(TimeOffRequest, TimeOffRequest.user_id == UserLocation.user_id)
        .where(
            UserLocation.location_id.in_(location_ids),
            TimeOffRequest.status == TimeOffStatus.PENDING,
        )
        .group_by(UserLocation.location_id),
    )
    open_shifts = await _grouped_counts(
        db,
        select(Shift.location_id, func.count(Shift.id))
        .where(
            Shift.location_id.in_(location_ids),
            Shift.is_open_shift.is_(True),
            Shift.date >= today,
            Shift.date <= window_end,
            Shift.status != ShiftStatus.CANCELLED,
        )
        .group_by(Shift.location_id),
    )
    alerts = await _grouped_counts(
        db,
        select(Shift.location_id, func.count(Shift.id))
        .where(
            Shift.location_id.in_(location_ids),
            Shift.date == tomorrow,
            Shift.status == ShiftStatus.SCHEDULED,
            Shift.is_published.is_(False),
        )
        .group_by(Shift.location_id),
    )

    rows = []
    for location in locations:
        rows.append({
            "location_id": location.id,
            "name": location.name,
            "is_headquarters": location.is_headquarters,
            "total_employees": employees.get(location.id, 0),
            "today_shifts": today_shifts.get(location.id, 0),
            "clocked_in": clocked_in.get(location.id, 0),
            "pending_requests": pending_requests.get(location.id, 0),
            "open_shifts": open_shifts.get(location.id, 0),
            "alerts": alerts.get(location.id, 0),
        })

    totals = {
        key: sum(row[key] for row in rows)
        for key in ("total_employees", "today_shifts", "clocked_in", "pending_requests", "open_shifts", "alerts")
    }

    return {
        "date": today,
        "can_view_all": resolve_scope(principal).sees_all,
        "locations": rows,
        "totals": totals,
    }


async def get_location_stats(
    db: AsyncSession,
    principal: Principal,
    location_id: UUID,
    start_date: date,
    end_date: date,
) -> dict:
    """Scheduled against worked hours for one location over a date range."""
    require_capability(principal, Capability.VIEW_TEAM)
    location = await get_location(db, principal, location_id)
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    result = await db.execute(
        select(Shift).where(
            Shift.location_id == location.id,
            Shift.date >= start_date,
            Shift.date <= end_date,
            Shift.is_day_off.is_(False),
            Shift.status != ShiftStatus.CANCELLED,
        )
    )
    shifts = result.scalars().all()
    scheduled_minutes = sum(shift.duration_minutes for shift in shifts)

    result = await db.execute(
        select(func.coalesce(func.sum(Timesheet.total_minutes), 0)).where(
            Timesheet.location_id == location.id,
            Timesheet.date >= start_date,
            Timesheet.date <= end_date,
            Timesheet.clock_out.is_not(None),
        )
    )
    worked_minutes = result.scalar() or 0

    result = await db.execute(
        select(Position.id, Position.name, Position.color, func.count(distinct(UserPosition.user_id)))
        .join(UserPosition, UserPosition.position_id == Position.id)
        .join(UserLocation, UserLocation.user_id == UserPosition.user_id)
        .where(
            UserLocation.location_id == location.id,
            Position.company_id == location.company_id,
            Position.is_active.is_(True),
        )
        .group_by(Position.id, Position.name, Position.color)
        .order_by(Position.name)
    )
    positions = [
        {"position_id": row[0], "name": row[1], "color": row[2], "employees": row[3]}
        for row in result.all()
    ]

    scheduled_hours = round(scheduled_minutes / 60, 2)
    worked_hours = round(worked_minutes / 60, 2)
    return {
        "location_id": location.id,
        "start_date": start_date,
        "end_date": end_date,
        "scheduled_hours": scheduled_hours,
        "worked_hours": worked_hours,
        "variance": round(worked_hours - scheduled_hours, 2),
        "total_shifts": len(shifts),
        "positions": positions,
    }


async def get_today_shifts(db: AsyncSession, principal: Principal, today: Optional[date] = None) -> List[dict]:
    """Today's shifts of every scoped location, grouped by location."""
    require_capability(principal, Capability.VIEW_DASHBOARD)
    today = today or await company_today(db, principal)
    locations = await list_locations(db, principal)

    query = select(Shift).where(
        Shift.location_id.in_([location.id for location in locations]),
        Shift.date == today,
    )
    if not has_capability(principal, Capability.VIEW_DRAFT_SHIFTS):
        query = query.where(Shift.is_published.is_(True))
    result = await db.execute(query.order_by(Shift.start_time))

    by_location = defaultdict(list)
    for shift in result.scalars().all():
        by_location[shift.location_id].append(shift)

    return [
        {"location_id": location.id, "name": location.name, "shifts": by_location.get(location.id, [])}
        for location in locations
    ]


async def get_alerts(db: AsyncSession, principal: Principal, today: Optional[date] = None) -> List[dict]:
    """Open shifts in the coming window and pending time-off requests, newest first."""
    require_capability(principal, Capability.VIEW_DASHBOARD)
    today = today or await company_today(db, principal)
    window_end = today + timedelta(days=settings.DASHBOARD_OPEN_SHIFT_WINDOW_DAYS)

    locations = await list_locations(db, principal)
    names = {location.id: location.name for location in locations}

    alerts = []
    result = await db.execute(
        select(Shift).where(
            Shift.location_id.in_(list(names)),
            Shift.is_open_shift.is_(True),
            Shift.is_published.is_(True),
            Shift.date >= today,
            Shift.date <= window_end,
            Shift.status != ShiftStatus.CANCELLED,
        )
    )
    for shift in result.scalars().all():
        alerts.append({
            "type": OPEN_SHIFT_ALERT,
            "message": f"Open shift on {shift.date.isoformat()} at {names[shift.location_id]}",
            "location_id": shift.location_id,
            "reference_id": shift.id,
            "date": shift.date,
            "created_at": shift.created_at,
        })

    if has_capability(principal, Capability.REVIEW_TIME_OFF):
        query = (
            select(TimeOffRequest, User)
            .join(User, User.id == TimeOffRequest.user_id)
            .where(
                User.company_id == principal.company_id,
                TimeOffRequest.status == TimeOffStatus.PENDING,
            )
        )
        if not resolve_scope(principal).sees_all:
            team = select(UserLocation.user_id).where(UserLocation.location_id.in_(list(names)))
            query = query.where(TimeOffRequest.user_id.in_(team))
        result = await db.execute(query)
        for request, user in result.all():
            alerts.append({
                "type": PENDING_REQUEST_ALERT,
                "message": (
                    f"{user.full_name} requested {request.type.value.lower()} time off "
                    f"from {request.start_date.isoformat()} to {request.end_date.isoformat()}"
                ),
                "location_id": None,
                "reference_id": request.id,
                "date": request.start_date,
                "created_at": request.created_at,
            })

    alerts.sort(key=lambda alert: alert["created_at"], reverse=True)
    return alerts
