from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from uuid import UUID

from shiftboard.models.time_off import TimeOffType, TimeOffStatus
from shiftboard.schemas.common import strict_date


class TimeOffCreate(BaseModel):
    type: TimeOffType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def validate_calendar_dates(cls, v):
        return strict_date(v)


class TimeOffReject(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class TimeOffResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: TimeOffType
    start_date: date
    end_date: date
    reason: Optional[str] = None
    status: TimeOffStatus
    approved_by_id: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TimeOffCreateResponse(BaseModel):
    request: TimeOffResponse
    overlapping_shifts: int


class TimeOffApproveResponse(BaseModel):
    request: TimeOffResponse
    cancelled_shifts: int


class TimeOffListResponse(BaseModel):
    requests: list[TimeOffResponse]
    total: int


class PendingCountResponse(BaseModel):
    count: int
