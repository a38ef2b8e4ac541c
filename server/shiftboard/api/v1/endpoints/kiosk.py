"""
Kiosk endpoints for location-specific clock-in/out using the location's kiosk token.

Public: the token identifies the location and the worker's PIN (when set)
authorizes each action.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.schemas.kiosk import (
    KioskClockInRequest, KioskEmployeeResponse, KioskLocationResponse, KioskPinRequest,
    KioskStatusResponse, KioskTodayRecord, KioskVerifyResponse,
)
from shiftboard.schemas.timesheet import TimesheetResponse
from shiftboard.services import kiosk_service
from shiftboard.services.timezone_service import get_location_timezone

router = APIRouter()


@router.get("/{token}", response_model=KioskLocationResponse)
@handle_endpoint_errors(operation_name="get_kiosk_location")
async def get_kiosk_location(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Location info for the kiosk page."""
    location = await kiosk_service.get_location_by_token(db, token)
    return KioskLocationResponse(
        id=location.id,
        name=location.name,
        address=location.address,
        timezone=await get_location_timezone(db, location.id),
    )


@router.get("/{token}/employees", response_model=List[KioskEmployeeResponse])
@handle_endpoint_errors(operation_name="list_kiosk_employees")
async def list_kiosk_employees(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    employees = await kiosk_service.list_kiosk_employees(db, location)
    return [
        KioskEmployeeResponse(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            has_pin=has_pin,
        )
        for user, has_pin in employees
    ]


@router.post("/{token}/verify-pin", response_model=KioskVerifyResponse)
@handle_endpoint_errors(operation_name="verify_kiosk_pin")
async def verify_kiosk_pin(
    token: str,
    data: KioskPinRequest,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    employee = await kiosk_service.verify_employee_pin(db, location, data.employee_id, data.pin)
    return KioskVerifyResponse(valid=True, pin_required=bool(employee.pin_hash))


@router.get("/{token}/status/{employee_id}", response_model=KioskStatusResponse)
@handle_endpoint_errors(operation_name="get_kiosk_status")
async def get_kiosk_status(
    token: str,
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    employee_uuid = parse_uuid(employee_id, "Employee ID")
    clock_status, timesheet = await kiosk_service.kiosk_status(db, location, employee_uuid)
    return KioskStatusResponse(
        employee_id=employee_uuid,
        status=clock_status,
        timesheet=TimesheetResponse.model_validate(timesheet) if timesheet else None,
    )


@router.post("/{token}/clock-in", response_model=TimesheetResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="kiosk_clock_in")
async def kiosk_clock_in(
    token: str,
    data: KioskClockInRequest,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    timesheet = await kiosk_service.kiosk_clock_in(
        db,
        location,
        data.employee_id,
        pin=data.pin,
        shift_id=data.shift_id,
    )
    return TimesheetResponse.model_validate(timesheet)


@router.post("/{token}/clock-out", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="kiosk_clock_out")
async def kiosk_clock_out(
    token: str,
    data: KioskPinRequest,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    timesheet = await kiosk_service.kiosk_clock_out(db, location, data.employee_id, pin=data.pin)
    return TimesheetResponse.model_validate(timesheet)


@router.post("/{token}/break-start", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="kiosk_start_break")
async def kiosk_start_break(
    token: str,
    data: KioskPinRequest,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    timesheet = await kiosk_service.kiosk_start_break(db, location, data.employee_id, pin=data.pin)
    return TimesheetResponse.model_validate(timesheet)


@router.post("/{token}/break-end", response_model=TimesheetResponse)
@handle_endpoint_errors(operation_name="kiosk_end_break")
async def kiosk_end_break(
    token: str,
    data: KioskPinRequest,
    db: AsyncSession = Depends(get_db),
):
    location = await kiosk_service.get_location_by_token(db, token)
    timesheet = await kiosk_service.kiosk_end_break(db, location, data.employee_id, pin=data.pin)
    return TimesheetResponse.model_validate(timesheet)


@router.get("/{token}/today", response_model=List[KioskTodayRecord])
@handle_endpoint_errors(operation_name="kiosk_today")
async def kiosk_today(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Most recent punches at this location today."""
    location = await kiosk_service.get_location_by_token(db, token)
    records = await kiosk_service.todays_records(db, location)
    return [
        KioskTodayRecord(
            employee_id=user.id,
            employee_name=user.full_name,
            timesheet=TimesheetResponse.model_validate(timesheet),
        )
        for timesheet, user in records
    ]
