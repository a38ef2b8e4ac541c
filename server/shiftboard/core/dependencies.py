from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shiftboard.core.database import get_db
from shiftboard.core.security import decode_token
from shiftboard.models.user import User
from shiftboard.services.access_service import Capability, Principal, require_capability

security = HTTPBearer()


async def load_principal(db: AsyncSession, user_id) -> Principal:
    """Build a principal from the user row and its assignments. Never cached."""
    result = await db.execute(
        select(User)
        .options(selectinload(User.user_locations), selectinload(User.user_positions))
        .where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return Principal(
        id=user.id,
        company_id=user.company_id,
        role=user.role,
        can_view_all=user.can_view_all,
        location_ids=frozenset(ul.location_id for ul in user.user_locations),
        position_ids=frozenset(up.position_id for up in user.user_positions),
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the principal of the current request from its bearer token."""
    token = credentials.credentials

    if not token or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials: token is empty",
        )

    payload = decode_token(token)

    if payload is None or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return await load_principal(db, user_uuid)


def require(capability: Capability):
    """Dependency factory for capability-based access control."""
    async def capability_checker(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        require_capability(principal, capability)
        return principal
    return capability_checker
