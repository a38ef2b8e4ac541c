"""
Shift Scheduling API Endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.dates import parse_optional_date
from shiftboard.core.dependencies import get_current_principal
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.models.shift import ShiftStatus
from shiftboard.schemas.shift import (
    ShiftCreate, ShiftUpdate, ShiftResponse, ShiftCountResponse,
    BulkShiftCreate, CopyWeekRequest, PublishRequest,
)
from shiftboard.services.access_service import Principal
from shiftboard.services import shift_service

router = APIRouter()


@router.get("", response_model=List[ShiftResponse])
@handle_endpoint_errors(operation_name="list_shifts")
async def list_shifts_endpoint(
    location_id: Optional[str] = Query(None, description="Filter by location ID"),
    user_id: Optional[str] = Query(None, description="Filter by assigned worker ID"),
    start_date: Optional[str] = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="Last day (YYYY-MM-DD)"),
    status: Optional[ShiftStatus] = Query(None, description="Filter by status"),
    is_published: Optional[bool] = Query(None),
    is_open_shift: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(500, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List shifts in the caller's scope. Workers only see published shifts."""
    shifts, _ = await shift_service.list_shifts(
        db,
        principal,
        location_id=parse_uuid(location_id, "Location ID") if location_id else None,
        user_id=parse_uuid(user_id, "User ID") if user_id else None,
        start_date=parse_optional_date(start_date),
        end_date=parse_optional_date(end_date),
        status=status,
        is_published=is_published,
        is_open_shift=is_open_shift,
        skip=skip,
        limit=limit,
    )
    return [ShiftResponse.model_validate(shift) for shift in shifts]


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_shift")
async def create_shift_endpoint(
    data: ShiftCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    shift = await shift_service.create_shift(db, principal, data)
    return ShiftResponse.model_validate(shift)


@router.post("/bulk", response_model=List[ShiftResponse], status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="bulk_create_shifts")
async def bulk_create_shifts_endpoint(
    data: BulkShiftCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create several shifts at once. Nothing is created if any of them fails."""
    shifts = await shift_service.bulk_create_shifts(db, principal, data.shifts)
    return [ShiftResponse.model_validate(shift) for shift in shifts]


@router.post("/copy-week", response_model=List[ShiftResponse], status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="copy_week")
async def copy_week_endpoint(
    data: CopyWeekRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Copy a week of shifts to another week as unpublished drafts."""
    shifts = await shift_service.copy_week(
        db,
        principal,
        data.location_id,
        data.source_week_start,
        data.target_week_start,
    )
    return [ShiftResponse.model_validate(shift) for shift in shifts]


@router.post("/publish", response_model=ShiftCountResponse)
@handle_endpoint_errors(operation_name="publish_shifts")
async def publish_shifts_endpoint(
    data: PublishRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    count = await shift_service.publish_shifts(
        db,
        principal,
        data.location_id,
        data.start_date,
        data.end_date,
    )
    return ShiftCountResponse(count=count)


@router.get("/{shift_id}", response_model=ShiftResponse)
@handle_endpoint_errors(operation_name="get_shift")
async def get_shift_endpoint(
    shift_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    shift = await shift_service.get_shift(db, principal, parse_uuid(shift_id, "Shift ID"))
    return ShiftResponse.model_validate(shift)


@router.put("/{shift_id}", response_model=ShiftResponse)
@handle_endpoint_errors(operation_name="update_shift")
async def update_shift_endpoint(
    shift_id: str,
    data: ShiftUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    shift = await shift_service.update_shift(db, principal, parse_uuid(shift_id, "Shift ID"), data)
    return ShiftResponse.model_validate(shift)


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_endpoint_errors(operation_name="delete_shift")
async def delete_shift_endpoint(
    shift_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await shift_service.delete_shift(db, principal, parse_uuid(shift_id, "Shift ID"))
    return None


@router.post("/{shift_id}/claim", response_model=ShiftResponse)
@handle_endpoint_errors(operation_name="claim_shift")
async def claim_shift_endpoint(
    shift_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Take an open shift for yourself."""
    shift = await shift_service.claim_shift(db, principal, parse_uuid(shift_id, "Shift ID"))
    return ShiftResponse.model_validate(shift)
