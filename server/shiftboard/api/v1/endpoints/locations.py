from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import get_db
from shiftboard.core.dependencies import get_current_principal
from shiftboard.core.error_handling import handle_endpoint_errors, parse_uuid
from shiftboard.models.location import Location
from shiftboard.schemas.location import KioskTokenResponse, LocationResponse
from shiftboard.services.access_service import Capability, Principal, has_capability
from shiftboard.services import location_service

router = APIRouter()


def _location_response(location: Location, principal: Principal) -> LocationResponse:
    response = LocationResponse.model_validate(location)
    if not has_capability(principal, Capability.MANAGE_LOCATIONS):
        response.kiosk_token = None
    return response


@router.get("", response_model=List[LocationResponse])
@handle_endpoint_errors(operation_name="list_locations")
async def list_locations_endpoint(
    include_inactive: bool = Query(False),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Locations in the caller's scope, headquarters first."""
    locations = await location_service.list_locations(db, principal, include_inactive=include_inactive)
    return [_location_response(location, principal) for location in locations]


@router.post("/{location_id}/headquarters", response_model=LocationResponse)
@handle_endpoint_errors(operation_name="set_headquarters")
async def set_headquarters_endpoint(
    location_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    location = await location_service.set_headquarters(db, principal, parse_uuid(location_id, "Location ID"))
    return _location_response(location, principal)


@router.post("/{location_id}/rotate-token", response_model=KioskTokenResponse)
@handle_endpoint_errors(operation_name="rotate_kiosk_token")
async def rotate_kiosk_token_endpoint(
    location_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    location = await location_service.rotate_kiosk_token(db, principal, parse_uuid(location_id, "Location ID"))
    return KioskTokenResponse(location_id=location.id, kiosk_token=location.kiosk_token)


@router.post("/{location_id}/deactivate", response_model=LocationResponse)
@handle_endpoint_errors(operation_name="deactivate_location")
async def deactivate_location_endpoint(
    location_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    location = await location_service.deactivate_location(db, principal, parse_uuid(location_id, "Location ID"))
    return _location_response(location, principal)
