from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID

from shiftboard.models.timesheet import ClockStatus
from shiftboard.schemas.timesheet import TimesheetResponse


class KioskLocationResponse(BaseModel):
    id: UUID
    name: str
    address: Optional[str] = None
    timezone: str


class KioskEmployeeResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    has_pin: bool


class KioskPinRequest(BaseModel):
    employee_id: UUID
    pin: Optional[str] = Field(None, max_length=12)


class KioskClockInRequest(KioskPinRequest):
    shift_id: Optional[UUID] = None


class KioskVerifyResponse(BaseModel):
    valid: bool
    pin_required: bool


class KioskStatusResponse(BaseModel):
    employee_id: UUID
    status: ClockStatus
    timesheet: Optional[TimesheetResponse] = None


class KioskTodayRecord(BaseModel):
    employee_id: UUID
    employee_name: str
    timesheet: TimesheetResponse
