"""Shared test configuration and fixtures.

Every test gets a fresh in-memory SQLite database (via aiosqlite) and a
session wrapped in a transaction that always rolls back, so no database
server is needed and tests cannot see each other's rows.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.jwt import create_token_pair
from app.auth.passwords import hash_password
from app.database import Base, get_db
from app.main import app
from app.models.user import User

_TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Database: one in-memory database per test, transactional session on top
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an engine whose single shared connection holds the in-memory DB."""
    engine = create_async_engine(_TEST_DB_URL, poolclass=StaticPool, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users: two hosts and two renters
# ---------------------------------------------------------------------------


async def create_user(db_session: AsyncSession, role: str, **overrides) -> User:
    """Insert a local-auth user with ``role`` directly into the DB."""
    unique = uuid.uuid4().hex[:8]
    fields = {
        "email": f"{role}-{unique}@test.com",
        "hashed_password": hash_password("testpass123"),
        "name": f"Test {role.title()}",
        "auth_provider": "local",
        "is_active": True,
        "role": role,
    }
    fields.update(overrides)
    user = User(**fields)
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "host")


@pytest_asyncio.fixture
async def renter_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "renter")


@pytest_asyncio.fixture
async def other_renter(db_session: AsyncSession) -> User:
    return await create_user(db_session, "renter")


@pytest_asyncio.fixture
async def other_host(db_session: AsyncSession) -> User:
    return await create_user(db_session, "host")


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def renter_headers(renter_user: User) -> dict[str, str]:
    return headers_for(renter_user)


@pytest_asyncio.fixture
async def other_renter_headers(other_renter: User) -> dict[str, str]:
    return headers_for(other_renter)


@pytest_asyncio.fixture
async def other_host_headers(other_host: User) -> dict[str, str]:
    return headers_for(other_host)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, host_headers: dict) -> dict:
    """Create and return an active listing (4 guests, 100/night) via the API."""
    response = await client.post(
        "/api/v1/properties",
        json={
            "title": "Test Apartment",
            "description": "An apartment for automated tests.",
            "location": "Lisbon, Portugal",
            "property_type": "apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "max_guests": 4,
            "price_per_night": 100,
            "amenities": ["wifi", "kitchen"],
        },
        headers=host_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()
