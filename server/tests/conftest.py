import os
import tempfile

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "shiftboard-test-logs"))

import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shiftboard.core.database import AsyncSessionLocal, Base, engine, get_db
from shiftboard.core.dependencies import load_principal
from shiftboard.core.security import create_access_token, get_pin_hash
from shiftboard.main import app
from shiftboard.models.company import Company
from shiftboard.models.location import Location
from shiftboard.models.position import Position
from shiftboard.models.user import User, UserLocation, UserPosition, UserRole


@pytest.fixture
async def db() -> AsyncSession:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db: AsyncSession) -> AsyncClient:
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def company(db: AsyncSession) -> Company:
    company = Company(id=uuid.uuid4(), name="Test Company", timezone="UTC")
    db.add(company)
    await db.commit()
    await db.refresh(company)
    return company


@pytest.fixture
async def locations(db: AsyncSession, company: Company) -> SimpleNamespace:
    """Downtown (headquarters) and Northside."""
    downtown = Location(id=uuid.uuid4(), company_id=company.id, name="Downtown", is_headquarters=True)
    northside = Location(id=uuid.uuid4(), company_id=company.id, name="Northside")
    db.add_all([downtown, northside])
    await db.commit()
    await db.refresh(downtown)
    await db.refresh(northside)
    return SimpleNamespace(downtown=downtown, northside=northside)


@pytest.fixture
async def position(db: AsyncSession, company: Company) -> Position:
    position = Position(id=uuid.uuid4(), company_id=company.id, name="Barista", color="#10B981")
    db.add(position)
    await db.commit()
    await db.refresh(position)
    return position


async def make_user(
    db: AsyncSession,
    company: Company,
    role: UserRole,
    first_name: str,
    locations=(),
    positions=(),
    pin: str = None,
    can_view_all: bool = False,
) -> User:
    user = User(
        id=uuid.uuid4(),
        company_id=company.id,
        role=role,
        first_name=first_name,
        last_name="Tester",
        email=f"{first_name.lower()}@test.com",
        can_view_all=can_view_all,
        pin_hash=get_pin_hash(pin) if pin else None,
    )
    db.add(user)
    await db.flush()
    for index, location in enumerate(locations):
        db.add(UserLocation(user_id=user.id, location_id=location.id, is_primary=index == 0))
    for position in positions:
        db.add(UserPosition(user_id=user.id, position_id=position.id))
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def staff(db: AsyncSession, company: Company, locations: SimpleNamespace, position: Position) -> SimpleNamespace:
    """One user per role; everyone but the super admin and northside worker is at Downtown."""
    downtown, northside = locations.downtown, locations.northside
    return SimpleNamespace(
        super_admin=await make_user(db, company, UserRole.SUPER_ADMIN, "Sam"),
        admin=await make_user(db, company, UserRole.ADMIN, "Ada", locations=[downtown, northside]),
        manager=await make_user(db, company, UserRole.MANAGER, "Mia", locations=[downtown]),
        supervisor=await make_user(db, company, UserRole.SUPERVISOR, "Sol", locations=[downtown]),
        employee=await make_user(
            db, company, UserRole.EMPLOYEE, "Eve", locations=[downtown], positions=[position], pin="1234"
        ),
        coworker=await make_user(db, company, UserRole.EMPLOYEE, "Cal", locations=[downtown], positions=[position]),
        north_employee=await make_user(db, company, UserRole.EMPLOYEE, "Nia", locations=[northside]),
        north_manager=await make_user(db, company, UserRole.MANAGER, "Ned", locations=[northside]),
    )


@pytest.fixture
async def principals(db: AsyncSession, staff: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(**{
        name: await load_principal(db, user.id) for name, user in vars(staff).items()
    })


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def at(day: str, hhmm: str) -> datetime:
    """Naive UTC instant for a day and time of day."""
    return datetime.fromisoformat(f"{day}T{hhmm}:00")
