"""Shared test fixtures."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from datetime import datetime, timedelta

import httpx
import jwt
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import lead_manager.models  # noqa: F401
from lead_manager.config import settings
from lead_manager.database import get_session
from lead_manager.models import (
    Campaign, District, DistrictContact, Lead, OutreachSequence, OutreachStep, Touchpoint, User,
    UserDistrictAssignment,
)


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Session shared by the test body and every request it makes."""
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def app(db_session):
    """FastAPI app with get_session routed to the test session."""
    from lead_manager.main import app

    async def _get_session():
        yield db_session

    app.dependency_overrides[get_session] = _get_session
    yield app
    app.dependency_overrides.clear()


def make_token(user_id, token_type: str = "access", expires_in: timedelta = timedelta(minutes=30)) -> str:
    """Sign a token the way the auth provider does."""
    now = datetime.utcnow()
    claims = {"user_id": str(user_id), "type": token_type, "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def token_for():
    return make_token


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest_asyncio.fixture
async def admin(db_session) -> User:
    user = User(email="admin@example.com", name="Admin", role="admin", allowed_companies=["CraftyCode", "Avalern"])
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def member(db_session) -> User:
    user = User(email="rep@example.com", name="Rep", role="member", allowed_companies=["Avalern"])
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def client(app, admin):
    """HTTP client authenticated as the admin."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", headers=auth_headers(admin)) as c:
        yield c


@pytest_asyncio.fixture
async def member_client(app, member):
    """HTTP client authenticated as a member."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", headers=auth_headers(member)) as c:
        yield c


class Factory:
    """Builds persisted rows with sensible defaults."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._clock = datetime(2026, 1, 1, 9, 0, 0)

    def _tick(self) -> datetime:
        # Strictly increasing created_at so newest-first ordering is deterministic
        self._clock += timedelta(minutes=1)
        return self._clock

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def campaign(self, **overrides) -> Campaign:
        data = dict(name="Spring Push", company="CraftyCode")
        data.update(overrides)
        return await self._save(Campaign(**data))

    async def sequence(self, steps=(), **overrides) -> OutreachSequence:
        """Sequence with steps given as dicts, numbered in order."""
        data = dict(name="Intro", company="CraftyCode", created_at=self._tick())
        data.update(overrides)
        sequence = await self._save(OutreachSequence(**data))
        for order, step in enumerate(steps, start=1):
            await self._save(OutreachStep(sequence_id=sequence.id, step_order=order, **step))
        return sequence

    async def lead(self, **overrides) -> Lead:
        suffix = uuid.uuid4().hex[:6]
        data = dict(
            tenant="CraftyCode",
            first_name="Jane",
            last_name="Doe",
            email=f"jane.{suffix}@realty.com",
            city="Burbank",
            source="Zillow",
            created_at=self._tick(),
        )
        data.update(overrides)
        return await self._save(Lead(**data))

    async def district(self, **overrides) -> District:
        data = dict(district_name="Burbank Unified", county="Los Angeles")
        data.update(overrides)
        return await self._save(District(**data))

    async def contact(self, district: District, **overrides) -> DistrictContact:
        data = dict(
            district_id=district.id,
            first_name="Sam",
            last_name="Lee",
            title="Superintendent",
            email=f"sam.{uuid.uuid4().hex[:6]}@district.org",
            created_at=self._tick(),
        )
        data.update(overrides)
        return await self._save(DistrictContact(**data))

    async def touchpoint(self, **overrides) -> Touchpoint:
        data = dict(type="email", created_at=self._tick())
        data.update(overrides)
        return await self._save(Touchpoint(**data))

    async def assign_district(self, user: User, district: District) -> UserDistrictAssignment:
        return await self._save(UserDistrictAssignment(user_id=user.id, district_id=district.id))


@pytest.fixture
def factory(db_session) -> Factory:
    return Factory(db_session)
