"""Test configuration and fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BEARER_TOKEN_SECRET", "test-secret")

from datetime import date, time, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from boattours.core.database import Base  # noqa: E402
from boattours.core.dependencies import create_access_token, get_db, get_notifier  # noqa: E402
from boattours.domain.actor import Actor  # noqa: E402
from boattours.models import *  # noqa: E402,F403 - Import all models
from boattours.models import Boat, Trip, TripSchedule, User, UserRole  # noqa: E402
from boattours.services.notification_service import NotificationEmitter  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    """Session factory configured like the application's."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier(session_factory):
    """Notification emitter writing to the test database."""
    return NotificationEmitter(session_factory)


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, notifier):
    """Application wired to the test database."""
    from boattours.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _create_user(session: AsyncSession, username: str, role: UserRole) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        first_name=username.capitalize(),
        last_name="Tester",
        role=role.value,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def customer(test_session):
    return await _create_user(test_session, "customer", UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def other_customer(test_session):
    return await _create_user(test_session, "othercustomer", UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def admin(test_session):
    return await _create_user(test_session, "admin", UserRole.ADMIN)


@pytest_asyncio.fixture
async def operations(test_session):
    return await _create_user(test_session, "operations", UserRole.OPERATIONS)


@pytest_asyncio.fixture
async def guide(test_session):
    return await _create_user(test_session, "guide", UserRole.GUIDE)


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=UserRole(user.role))


@pytest.fixture
def customer_actor(customer):
    return actor_for(customer)


@pytest.fixture
def other_customer_actor(other_customer):
    return actor_for(other_customer)


@pytest.fixture
def admin_actor(admin):
    return actor_for(admin)


@pytest.fixture
def operations_actor(operations):
    return actor_for(operations)


@pytest.fixture
def guide_actor(guide):
    return actor_for(guide)


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, UserRole(user.role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def guide_headers(guide):
    return auth_headers(guide)


@pytest_asyncio.fixture
async def trip(test_session, admin):
    """Active sunset cruise: 45.00 USD per passenger, 3 hours, 10 seats."""
    trip = Trip(
        title="Sunset Cruise",
        description="Evening sail along the coast",
        price_amount=4500,
        price_currency="USD",
        duration_hours=3,
        max_capacity=10,
        departure_location="North Pier",
        return_location="North Pier",
        is_active=True,
        created_by=admin.id,
    )
    test_session.add(trip)
    await test_session.commit()
    return trip


async def make_schedule(
    session: AsyncSession,
    trip: Trip,
    scheduled_date: date,
    capacity: int = 10,
    departure_time: time = time(9, 0),
    return_time: time | None = time(12, 0),
) -> TripSchedule:
    schedule = TripSchedule(
        trip_id=trip.id,
        scheduled_date=scheduled_date,
        departure_time=departure_time,
        return_time=return_time,
        capacity=capacity,
        available_seats=capacity,
        status="scheduled",
    )
    session.add(schedule)
    await session.commit()
    return schedule


@pytest_asyncio.fixture
async def schedule(test_session, trip):
    """Schedule sailing thirty days from now with ten seats."""
    return await make_schedule(test_session, trip, date.today() + timedelta(days=30))


@pytest_asyncio.fixture
async def boat(test_session):
    boat = Boat(name="Sea Breeze", capacity=12, is_available=True)
    test_session.add(boat)
    await test_session.commit()
    return boat


@pytest.fixture
def passengers():
    """Build a list of passenger payloads."""
    def _build(count: int) -> list[dict]:
        return [
            {"first_name": f"Passenger{i}", "last_name": "Doe", "age": 30 + i}
            for i in range(count)
        ]
    return _build


@pytest.fixture
def schedule_factory(test_session, trip):
    """Create further schedules of ``trip``, e.g. ones that already departed."""
    async def _create(scheduled_date: date, **kwargs) -> TripSchedule:
        return await make_schedule(test_session, trip, scheduled_date, **kwargs)
    return _create
