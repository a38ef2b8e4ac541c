from fastapi import APIRouter
from shiftboard.api.v1.endpoints import health, shifts, timesheets, kiosk, time_off, locations, dashboard

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(timesheets.router, prefix="/timesheets", tags=["timesheets"])
api_router.include_router(kiosk.router, prefix="/kiosk", tags=["kiosk"])
api_router.include_router(time_off.router, prefix="/time-off", tags=["time-off"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
