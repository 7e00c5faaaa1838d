"""Shared test fixtures for Wanderlust."""

import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# Must be set before wanderlust.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wanderlust.core.config import settings
from wanderlust.core.dependencies import get_db
from wanderlust.core.enums import TripRole
from wanderlust.db.session import Base
from wanderlust.main import app
from wanderlust.models.registry import Trip, TripMember, User


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def trip(session_factory):
    """A USD trip: alice owns it, bob and carol are members, vic is a viewer, dave is an outsider."""
    async with session_factory() as session:
        users = {
            name: User(name=name.capitalize(), email=f"{name}@example.com")
            for name in ("alice", "bob", "carol", "dave", "vic")
        }
        session.add_all(users.values())
        await session.flush()

        trip = Trip(name="Lisbon 2026", currency="USD", created_by=users["alice"].id)
        session.add(trip)
        await session.flush()

        for name, role in (
            ("alice", TripRole.OWNER),
            ("bob", TripRole.MEMBER),
            ("carol", TripRole.MEMBER),
            ("vic", TripRole.VIEWER),
        ):
            session.add(TripMember(trip_id=trip.id, user_id=users[name].id, role=role))
            await session.flush()

        await session.commit()

        return SimpleNamespace(id=trip.id, **{name: user.id for name, user in users.items()})


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Build bearer headers for a user id."""

    def _headers(user_id: int) -> dict:
        token = jwt.encode(
            {"sub": str(user_id), "exp": datetime.now(timezone.utc) + timedelta(minutes=30)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGO,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
