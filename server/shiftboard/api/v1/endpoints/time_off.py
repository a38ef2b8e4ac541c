from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.dependencies import get_current_principal
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.models.time_off import TimeOffStatus
from shiftboard.schemas.time_off import (
    PendingCountResponse, TimeOffApproveResponse, TimeOffCreate, TimeOffCreateResponse,
    TimeOffListResponse, TimeOffReject, TimeOffResponse,
)
from shiftboard.services.access_service import Principal
from shiftboard.services import time_off_service

router = APIRouter()


@router.get("", response_model=TimeOffListResponse)
@handle_endpoint_errors(operation_name="list_time_off_requests")
async def list_time_off_requests(
    status: Optional[TimeOffStatus] = Query(None),
    user_id: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    requests, total = await time_off_service.list_requests(
        db,
        principal,
        status=status,
        user_id=parse_uuid(user_id, "User ID") if user_id else None,
        skip=skip,
        limit=limit,
    )
    return TimeOffListResponse(
        requests=[TimeOffResponse.model_validate(r) for r in requests],
        total=total,
    )


@router.get("/pending-count", response_model=PendingCountResponse)
@handle_endpoint_errors(operation_name="time_off_pending_count")
async def time_off_pending_count(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return PendingCountResponse(count=await time_off_service.pending_count(db, principal))


@router.post("", response_model=TimeOffCreateResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_time_off_request")
async def create_time_off_request(
    data: TimeOffCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    request, overlapping = await time_off_service.create_request(db, principal, data)
    return TimeOffCreateResponse(
        request=TimeOffResponse.model_validate(request),
        overlapping_shifts=overlapping,
    )


@router.post("/{request_id}/approve", response_model=TimeOffApproveResponse)
@handle_endpoint_errors(operation_name="approve_time_off_request")
async def approve_time_off_request(
    request_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending request; the requester's shifts in the range are cancelled."""
    request, cancelled = await time_off_service.approve_request(
        db, principal, parse_uuid(request_id, "Request ID")
    )
    return TimeOffApproveResponse(
        request=TimeOffResponse.model_validate(request),
        cancelled_shifts=cancelled,
    )


@router.post("/{request_id}/reject", response_model=TimeOffResponse)
@handle_endpoint_errors(operation_name="reject_time_off_request")
async def reject_time_off_request(
    request_id: str,
    data: TimeOffReject,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    request = await time_off_service.reject_request(
        db, principal, parse_uuid(request_id, "Request ID"), reason=data.reason
    )
    return TimeOffResponse.model_validate(request)


@router.post("/{request_id}/cancel", response_model=TimeOffResponse)
@handle_endpoint_errors(operation_name="cancel_time_off_request")
async def cancel_time_off_request(
    request_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    request = await time_off_service.cancel_request(db, principal, parse_uuid(request_id, "Request ID"))
    return TimeOffResponse.model_validate(request)
