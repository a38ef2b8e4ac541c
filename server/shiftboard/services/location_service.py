"""
Location lookups and the few location rules with business meaning:
one headquarters per company, kiosk token rotation, and deactivation.
"""
import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.config import settings
from shiftboard.core.error_handling import ConflictError, NotFoundError
from shiftboard.core.query_builder import apply_location_scope, delete_record
from shiftboard.models.location import Location, generate_kiosk_token
from shiftboard.services.access_service import (
    Capability,
    Principal,
    ensure_location_access,
    ensure_record_in_scope,
    require_capability,
)

logger = logging.getLogger(__name__)


async def _load_location(db: AsyncSession, principal: Principal, location_id: UUID) -> Location:
    result = await db.execute(select(Location).where(Location.id == location_id))
    location = result.scalar_one_or_none()
    if location is None or location.company_id != principal.company_id:
        raise NotFoundError("Location not found")
    return location


async def get_location_for_action(
    db: AsyncSession,
    principal: Principal,
    location_id: UUID,
    require_active: bool = False,
) -> Location:
    """
    Resolve a caller-supplied location for a write.

    A location outside the caller's scope is an authorization failure.
    When ``require_active`` is set and ``ENFORCE_ACTIVE_LOCATION`` is on,
    an inactive location is a conflict.
    """
    location = await _load_location(db, principal, location_id)
    ensure_location_access(principal, location.id)
    if require_active and settings.ENFORCE_ACTIVE_LOCATION and not location.is_active:
        raise ConflictError("Location is inactive")
    return location


async def get_location(db: AsyncSession, principal: Principal, location_id: UUID) -> Location:
    """Fetch a location by id; out-of-scope locations are reported as missing."""
    location = await _load_location(db, principal, location_id)
    ensure_record_in_scope(principal, location.id, "Location")
    return location


async def list_locations(
    db: AsyncSession,
    principal: Principal,
    include_inactive: bool = False,
) -> List[Location]:
    """Locations in the caller's scope, headquarters first then by name."""
    query = select(Location).where(Location.company_id == principal.company_id)
    query = apply_location_scope(query, Location.id, principal)
    if not include_inactive:
        query = query.where(Location.is_active.is_(True))
    query = query.order_by(Location.is_headquarters.desc(), Location.name)
    result = await db.execute(query)
    return list(result.scalars().all())


async def set_headquarters(db: AsyncSession, principal: Principal, location_id: UUID) -> Location:
    """Flag a location as the headquarters and clear the flag everywhere else."""
    require_capability(principal, Capability.MANAGE_LOCATIONS)
    location = await get_location(db, principal, location_id)
    if not location.is_active:
        raise ConflictError("An inactive location cannot be the headquarters")

    await db.execute(
        update(Location)
        .where(
            Location.company_id == location.company_id,
            Location.id != location.id,
            Location.is_headquarters.is_(True),
        )
        .values(is_headquarters=False)
    )
    location.is_headquarters = True
    await db.commit()
    await db.refresh(location)

    logger.info(f"Location {location.id} set as headquarters of company {location.company_id}")
    return location


async def rotate_kiosk_token(db: AsyncSession, principal: Principal, location_id: UUID) -> Location:
    """Issue a fresh kiosk token; the previous one stops working immediately."""
    require_capability(principal, Capability.MANAGE_LOCATIONS)
    location = await get_location(db, principal, location_id)
    location.kiosk_token = generate_kiosk_token()
    await db.commit()
    await db.refresh(location)

    logger.info(f"Kiosk token rotated for location {location.id}")
    return location


async def deactivate_location(db: AsyncSession, principal: Principal, location_id: UUID) -> Location:
    require_capability(principal, Capability.MANAGE_LOCATIONS)
    location = await get_location(db, principal, location_id)
    if location.is_headquarters:
        raise ConflictError("The headquarters location cannot be deactivated")
    if not location.is_active:
        return location

    await delete_record(db, location)
    await db.commit()
    await db.refresh(location)

    logger.info(f"Location {location.id} deactivated")
    return location
