"""
Dashboard API Endpoints (read-only rollups)
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.dates import parse_calendar_date, parse_optional_date
from shiftboard.core.dependencies import get_current_principal
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.schemas.dashboard import DashboardAlert, DashboardOverview, LocationStats, TodayShiftsGroup
from shiftboard.schemas.shift import ShiftResponse
from shiftboard.services.access_service import Principal
from shiftboard.services import dashboard_service

router = APIRouter()


@router.get("/overview", response_model=DashboardOverview)
@handle_endpoint_errors(operation_name="dashboard_overview")
async def dashboard_overview(
    date: Optional[str] = Query(None, description="Day to report on (YYYY-MM-DD), defaults to today"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    overview = await dashboard_service.get_overview(db, principal, today=parse_optional_date(date))
    return DashboardOverview(**overview)


@router.get("/locations/{location_id}/stats", response_model=LocationStats)
@handle_endpoint_errors(operation_name="dashboard_location_stats")
async def dashboard_location_stats(
    location_id: str,
    start_date: str = Query(..., description="First day (YYYY-MM-DD)"),
    end_date: str = Query(..., description="Last day (YYYY-MM-DD)"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    stats = await dashboard_service.get_location_stats(
        db,
        principal,
        parse_uuid(location_id, "Location ID"),
        parse_calendar_date(start_date),
        parse_calendar_date(end_date),
    )
    return LocationStats(**stats)


@router.get("/today-shifts", response_model=List[TodayShiftsGroup])
@handle_endpoint_errors(operation_name="dashboard_today_shifts")
async def dashboard_today_shifts(
    date: Optional[str] = Query(None, description="Day to report on (YYYY-MM-DD), defaults to today"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    groups = await dashboard_service.get_today_shifts(db, principal, today=parse_optional_date(date))
    return [
        TodayShiftsGroup(
            location_id=group["location_id"],
            name=group["name"],
            shifts=[ShiftResponse.model_validate(shift) for shift in group["shifts"]],
        )
        for group in groups
    ]


@router.get("/alerts", response_model=List[DashboardAlert])
@handle_endpoint_errors(operation_name="dashboard_alerts")
async def dashboard_alerts(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    alerts = await dashboard_service.get_alerts(db, principal)
    return [DashboardAlert(**alert) for alert in alerts]
