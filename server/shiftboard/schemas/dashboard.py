from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from uuid import UUID

from shiftboard.schemas.shift import ShiftResponse


class LocationOverview(BaseModel):
    location_id: UUID
    name: str
    is_headquarters: bool
    total_employees: int
    today_shifts: int
    clocked_in: int
    pending_requests: int
    open_shifts: int
    alerts: int


class DashboardTotals(BaseModel):
    total_employees: int
    today_shifts: int
    clocked_in: int
    pending_requests: int
    open_shifts: int
    alerts: int


class DashboardOverview(BaseModel):
    date: date
    can_view_all: bool
    locations: list[LocationOverview]
    totals: DashboardTotals


class PositionStat(BaseModel):
    position_id: UUID
    name: str
    color: str
    employees: int


class LocationStats(BaseModel):
    location_id: UUID
    start_date: date
    end_date: date
    scheduled_hours: float
    worked_hours: float
    variance: float
    total_shifts: int
    positions: list[PositionStat]


class TodayShiftsGroup(BaseModel):
    location_id: UUID
    name: str
    shifts: list[ShiftResponse]


class DashboardAlert(BaseModel):
    type: str
    message: str
    location_id: Optional[UUID] = None
    reference_id: UUID
    date: date
    created_at: datetime
