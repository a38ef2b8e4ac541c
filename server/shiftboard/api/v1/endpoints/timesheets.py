"""
Self-service timeclock and timesheet review endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.dates import parse_optional_date
from shiftboard.core.dependencies import get_current_principal
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.models.timesheet import TimesheetStatus
from shiftboard.schemas.timesheet import (
    ClockInRequest, ClockStatusResponse, TimesheetListResponse, TimesheetReject, TimesheetResponse,
)
from shiftboard.services.access_service import Principal
from shiftboard.services import timesheet_service

router = APIRouter()


@router.get("", response_model=TimesheetListResponse)
@handle_endpoint_errors(operation_name="list_timesheets")
async def list_timesheets_endpoint(
    location_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="Last day (YYYY-MM-DD)"),
    status: Optional[TimesheetStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List timesheets. Workers without review rights only see their own."""
    timesheets, total = await timesheet_service.list_timesheets(
        db,
        principal,
        location_id=parse_uuid(location_id, "Location ID") if location_id else None,
        user_id=parse_uuid(user_id, "User ID") if user_id else None,
        start_date=parse_optional_date(start_date),
        end_date=parse_optional_date(end_date),
        status=status,
        skip=skip,
        limit=limit,
    )
    return TimesheetListResponse(
        timesheets=[TimesheetResponse.model_validate(ts) for ts in timesheets],
        total=total,
    )


@router.get("/status", response_model=ClockStatusResponse)
@handle_endpoint_errors(operation_name="get_clock_status")
async def get_status_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    clock_status, timesheet = await timesheet_service.get_status(db, principal)
    return ClockStatusResponse(
        status=clock_status,
        timesheet=TimesheetResponse.model_validate(timesheet) if timesheet else None,
    )


@router.post("/clock-in", response_model=TimesheetResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="clock_in")
async def clock_in_endpoint(
    data: ClockInRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.clock_in(db, principal, data.location_id, shift_id=data.shift_id)
    return TimesheetResponse.model_validate(timesheet)


@router.post("/break/start", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="start_break")
async def start_break_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.start_break(db, principal)
    return TimesheetResponse.model_validate(timesheet)


@router.post("/break/end", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="end_break")
async def end_break_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.end_break(db, principal)
    return TimesheetResponse.model_validate(timesheet)


@router.post("/clock-out", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="clock_out")
async def clock_out_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.clock_out(db, principal)
    return TimesheetResponse.model_validate(timesheet)


@router.get("/{timesheet_id}", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="get_timesheet")
async def get_timesheet_endpoint(
    timesheet_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.get_timesheet(db, principal, parse_uuid(timesheet_id, "Timesheet ID"))
    return TimesheetResponse.model_validate(timesheet)


@router.post("/{timesheet_id}/approve", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="approve_timesheet")
async def approve_timesheet_endpoint(
    timesheet_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.approve_timesheet(db, principal, parse_uuid(timesheet_id, "Timesheet ID"))
    return TimesheetResponse.model_validate(timesheet)


@router.post("/{timesheet_id}/reject", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="reject_timesheet")
async def reject_timesheet_endpoint(
    timesheet_id: str,
    data: TimesheetReject,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    timesheet = await timesheet_service.reject_timesheet(
        db,
        principal,
        parse_uuid(timesheet_id, "Timesheet ID"),
        reason=data.reason,
    )
    return TimesheetResponse.model_validate(timesheet)
