"""
Access scope resolution and capability checks.

Every service call receives the acting ``Principal`` explicitly. The scope
is recomputed from it on each call.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from uuid import UUID

from shiftboard.core.error_handling import AuthorizationError, NotFoundError
from shiftboard.models.user import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""
    id: UUID
    company_id: UUID
    role: UserRole
    can_view_all: bool = False
    location_ids: FrozenSet[UUID] = field(default_factory=frozenset)
    position_ids: FrozenSet[UUID] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AccessScope:
    sees_all: bool
    location_ids: FrozenSet[UUID]

    def allows(self, location_id: Optional[UUID]) -> bool:
        if self.sees_all:
            return True
        return location_id is not None and location_id in self.location_ids


def resolve_scope(principal: Principal) -> AccessScope:
    """Locations the principal may read or write."""
    sees_all = principal.role == UserRole.SUPER_ADMIN or bool(principal.can_view_all)
    return AccessScope(sees_all=sees_all, location_ids=frozenset(principal.location_ids))


class Capability(str, enum.Enum):
    MANAGE_SHIFTS = "MANAGE_SHIFTS"
    PLAN_SCHEDULE = "PLAN_SCHEDULE"
    CLAIM_SHIFTS = "CLAIM_SHIFTS"
    VIEW_DRAFT_SHIFTS = "VIEW_DRAFT_SHIFTS"
    TRACK_OWN_TIME = "TRACK_OWN_TIME"
    REVIEW_TIMESHEETS = "REVIEW_TIMESHEETS"
    REQUEST_TIME_OFF = "REQUEST_TIME_OFF"
    REVIEW_TIME_OFF = "REVIEW_TIME_OFF"
    VIEW_TEAM = "VIEW_TEAM"
    MANAGE_LOCATIONS = "MANAGE_LOCATIONS"
    VIEW_DASHBOARD = "VIEW_DASHBOARD"


_EVERYONE = frozenset(UserRole)
_SCHEDULERS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.MANAGER, UserRole.SUPERVISOR})
_PLANNERS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.MANAGER})
_ADMINS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})

ROLE_CAPABILITIES = {
    Capability.MANAGE_SHIFTS: _SCHEDULERS,
    Capability.PLAN_SCHEDULE: _PLANNERS,
    Capability.CLAIM_SHIFTS: _EVERYONE,
    Capability.VIEW_DRAFT_SHIFTS: _SCHEDULERS,
    Capability.TRACK_OWN_TIME: _EVERYONE,
    Capability.REVIEW_TIMESHEETS: _SCHEDULERS,
    Capability.REQUEST_TIME_OFF: _EVERYONE,
    Capability.REVIEW_TIME_OFF: _SCHEDULERS,
    Capability.VIEW_TEAM: _SCHEDULERS,
    Capability.MANAGE_LOCATIONS: _ADMINS,
    Capability.VIEW_DASHBOARD: _EVERYONE,
}


def capabilities_for(role: UserRole) -> FrozenSet[Capability]:
    """Set of capabilities granted to a role."""
    return frozenset(cap for cap, roles in ROLE_CAPABILITIES.items() if role in roles)


def has_capability(principal: Principal, capability: Capability) -> bool:
    return capability in capabilities_for(principal.role)


def require_capability(principal: Principal, capability: Capability) -> None:
    if not has_capability(principal, capability):
        logger.warning(f"User {principal.id} ({principal.role.value}) lacks {capability.value}")
        raise AuthorizationError(f"Insufficient permissions: {capability.value} required")


def ensure_location_access(principal: Principal, location_id: UUID) -> None:
    """Reject a caller-supplied location outside the principal's scope."""
    if not resolve_scope(principal).allows(location_id):
        logger.warning(f"User {principal.id} denied access to location {location_id}")
        raise AuthorizationError("You do not have access to this location")


def ensure_record_in_scope(
    principal: Principal,
    location_id: Optional[UUID],
    entity: str = "Record",
    company_id: Optional[UUID] = None,
) -> None:
    """Records outside the scope (or the company) are reported as missing."""
    if company_id is not None and company_id != principal.company_id:
        raise NotFoundError(f"{entity} not found")
    if not resolve_scope(principal).allows(location_id):
        raise NotFoundError(f"{entity} not found")
