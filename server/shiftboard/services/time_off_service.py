"""
Time-off requests. Approval cancels every shift of the requester inside the
requested range, in the same transaction.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.error_handling import ConflictError, NotFoundError, ValidationError
from shiftboard.core.query_builder import apply_location_scope, filter_by_status, get_paginated_results
from shiftboard.models.shift import Shift, ShiftStatus
from shiftboard.models.time_off import TimeOffRequest, TimeOffStatus
from shiftboard.models.user import User, UserLocation
from shiftboard.schemas.time_off import TimeOffCreate
from shiftboard.services.access_service import (
    Capability,
    Principal,
    has_capability,
    require_capability,
    resolve_scope,
)
from shiftboard.services.shift_service import cancel_shifts_for_user
from shiftboard.services.timezone_service import utcnow

logger = logging.getLogger(__name__)


def _visible_requests(principal: Principal):
    """Own requests for workers; requests of workers sharing a scoped location for reviewers."""
    query = select(TimeOffRequest).join(User, User.id == TimeOffRequest.user_id).where(
        User.company_id == principal.company_id
    )
    if not has_capability(principal, Capability.REVIEW_TIME_OFF):
        return query.where(TimeOffRequest.user_id == principal.id)

    if resolve_scope(principal).sees_all:
        return query
    team = apply_location_scope(select(UserLocation.user_id), UserLocation.location_id, principal)
    return query.where(TimeOffRequest.user_id.in_(team))


async def _get_visible_request(db: AsyncSession, principal: Principal, request_id: UUID) -> TimeOffRequest:
    result = await db.execute(_visible_requests(principal).where(TimeOffRequest.id == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Time-off request not found")
    return request


async def count_overlapping_shifts(db: AsyncSession, user_id: UUID, start_date, end_date) -> int:
    result = await db.execute(
        select(func.count(Shift.id)).where(
            Shift.user_id == user_id,
            Shift.date >= start_date,
            Shift.date <= end_date,
            Shift.status != ShiftStatus.CANCELLED,
        )
    )
    return result.scalar() or 0


async def create_request(
    db: AsyncSession,
    principal: Principal,
    data: TimeOffCreate,
) -> Tuple[TimeOffRequest, int]:
    """Create a PENDING request. Also reports how many of the requester's shifts it overlaps."""
    require_capability(principal, Capability.REQUEST_TIME_OFF)
    if data.end_date < data.start_date:
        raise ValidationError("end_date must be on or after start_date")

    request = TimeOffRequest(
        user_id=principal.id,
        type=data.type,
        start_date=data.start_date,
        end_date=data.end_date,
        reason=data.reason,
        status=TimeOffStatus.PENDING,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)

    overlapping = await count_overlapping_shifts(db, principal.id, data.start_date, data.end_date)
    logger.info(f"Time-off request {request.id} created by {principal.id} ({overlapping} overlapping shifts)")
    return request, overlapping


async def list_requests(
    db: AsyncSession,
    principal: Principal,
    status: Optional[TimeOffStatus] = None,
    user_id: Optional[UUID] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[TimeOffRequest], int]:
    query = _visible_requests(principal)
    if status is not None:
        query = filter_by_status(query, TimeOffRequest, status)
    if user_id is not None:
        query = query.where(TimeOffRequest.user_id == user_id)

    return await get_paginated_results(
        db,
        query,
        skip=skip,
        limit=limit,
        order_by=TimeOffRequest.created_at.desc(),
    )


async def pending_count(db: AsyncSession, principal: Principal) -> int:
    query = filter_by_status(_visible_requests(principal), TimeOffRequest, TimeOffStatus.PENDING)
    result = await db.execute(select(func.count()).select_from(query.subquery()))
    return result.scalar() or 0


async def approve_request(
    db: AsyncSession,
    principal: Principal,
    request_id: UUID,
) -> Tuple[TimeOffRequest, int]:
    """Approve a PENDING request and cancel the requester's shifts in its range."""
    require_capability(principal, Capability.REVIEW_TIME_OFF)
    request = await _get_visible_request(db, principal, request_id)
    if request.status != TimeOffStatus.PENDING:
        raise ConflictError(f"Only pending requests can be approved (request is {request.status.value})")

    try:
        request.status = TimeOffStatus.APPROVED
        request.approved_by_id = principal.id
        request.approved_at = utcnow()
        cancelled = await cancel_shifts_for_user(db, request.user_id, request.start_date, request.end_date)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(request)

    logger.info(f"Time-off request {request.id} approved by {principal.id}; {cancelled} shifts cancelled")
    return request, cancelled


async def reject_request(
    db: AsyncSession,
    principal: Principal,
    request_id: UUID,
    reason: Optional[str] = None,
) -> TimeOffRequest:
    require_capability(principal, Capability.REVIEW_TIME_OFF)
    request = await _get_visible_request(db, principal, request_id)
    if request.status != TimeOffStatus.PENDING:
        raise ConflictError(f"Only pending requests can be rejected (request is {request.status.value})")

    request.status = TimeOffStatus.REJECTED
    request.approved_by_id = principal.id
    request.approved_at = utcnow()
    request.rejected_reason = reason
    await db.commit()
    await db.refresh(request)

    logger.info(f"Time-off request {request.id} rejected by {principal.id}")
    return request


async def cancel_request(db: AsyncSession, principal: Principal, request_id: UUID) -> TimeOffRequest:
    """Withdraw one of the caller's own pending requests."""
    result = await db.execute(
        select(TimeOffRequest).where(
            TimeOffRequest.id == request_id,
            TimeOffRequest.user_id == principal.id,
        )
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Time-off request not found")
    if request.status != TimeOffStatus.PENDING:
        raise ConflictError("Only pending requests can be cancelled")

    request.status = TimeOffStatus.CANCELLED
    await db.commit()
    await db.refresh(request)

    logger.info(f"Time-off request {request.id} cancelled by its requester")
    return request
