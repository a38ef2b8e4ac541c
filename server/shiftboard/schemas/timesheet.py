from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID

from shiftboard.models.timesheet import TimesheetStatus, TimesheetSource, ClockStatus


class ClockInRequest(BaseModel):
    location_id: UUID
    shift_id: Optional[UUID] = None


class TimesheetReject(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class TimesheetResponse(BaseModel):
    id: UUID
    user_id: UUID
    location_id: UUID
    shift_id: Optional[UUID] = None
    date: date
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    break_minutes: int
    total_minutes: Optional[int] = None
    status: TimesheetStatus
    source: TimesheetSource
    notes: Optional[str] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TimesheetListResponse(BaseModel):
    timesheets: list[TimesheetResponse]
    total: int


class ClockStatusResponse(BaseModel):
    status: ClockStatus
    timesheet: Optional[TimesheetResponse] = None
