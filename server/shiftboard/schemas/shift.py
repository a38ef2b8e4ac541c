"""
Pydantic schemas for shift scheduling.
"""
from typing import Optional, List
from datetime import date, time, datetime
from pydantic import BaseModel, Field, field_validator
from uuid import UUID

from shiftboard.models.shift import ShiftStatus, DayOffType
from shiftboard.schemas.common import strict_date


class ShiftCreate(BaseModel):
    """Draft of a shift or day-off record."""
    location_id: UUID
    date: date
    user_id: Optional[UUID] = None
    position_id: Optional[UUID] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: Optional[int] = Field(None, ge=0)
    status: Optional[ShiftStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)
    is_open_shift: bool = False
    is_published: bool = False
    is_day_off: bool = False
    day_off_type: Optional[DayOffType] = None
    is_paid: bool = True

    @field_validator('date', mode='before')
    @classmethod
    def validate_calendar_dates(cls, v):
        return strict_date(v)


class ShiftUpdate(BaseModel):
    """Partial update; only the fields that were sent are applied."""
    date: Optional[date] = None
    user_id: Optional[UUID] = None
    position_id: Optional[UUID] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: Optional[int] = Field(None, ge=0)
    status: Optional[ShiftStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)
    is_open_shift: Optional[bool] = None
    is_published: Optional[bool] = None
    is_day_off: Optional[bool] = None
    day_off_type: Optional[DayOffType] = None
    is_paid: Optional[bool] = None

    @field_validator('date', mode='before')
    @classmethod
    def validate_calendar_dates(cls, v):
        return strict_date(v)


class BulkShiftCreate(BaseModel):
    shifts: List[ShiftCreate]


class CopyWeekRequest(BaseModel):
    location_id: UUID
    source_week_start: date
    target_week_start: date

    @field_validator('source_week_start', 'target_week_start', mode='before')
    @classmethod
    def validate_calendar_dates(cls, v):
        return strict_date(v)


class PublishRequest(BaseModel):
    location_id: UUID
    start_date: date
    end_date: date

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def validate_calendar_dates(cls, v):
        return strict_date(v)


class ShiftResponse(BaseModel):
    """Schema for shift response."""
    id: UUID
    location_id: UUID
    user_id: Optional[UUID] = None
    position_id: Optional[UUID] = None
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: int
    duration_minutes: int = 0
    status: ShiftStatus
    notes: Optional[str] = None
    is_open_shift: bool
    is_published: bool
    is_day_off: bool
    day_off_type: Optional[DayOffType] = None
    is_paid: bool
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ShiftCountResponse(BaseModel):
    count: int
