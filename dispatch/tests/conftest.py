"""
Centralized Test Configuration.
"""

import pytest
from datetime import date, time
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from dispatch.app.main import app
from dispatch.app.db.session import get_db, Base
from dispatch.app.core.redis_client import get_redis
from dispatch.app.core.dependencies import get_location_resolver
from dispatch.app.domain.geo.location_resolver import LocationResolver
from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.trip import Trip
from dispatch.app.models.trip_enums import TripCategory, TripStatus
from dispatch.app.models.resource_enums import DriverAvailability, VehicleAvailability

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Fresh database per test
@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}
            self.ttls = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def offline_resolver():
    """Resolver with no geocoder: every lookup goes to the fallback table."""
    return LocationResolver(geocoder=None)


@pytest.fixture
async def client(session_factory, mock_redis, offline_resolver):
    """Async client for testing, wired to the per-test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return mock_redis

    async def override_get_location_resolver():
        return offline_resolver

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_location_resolver] = override_get_location_resolver

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_driver(db_session):
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        fields = dict(
            name=f"Driver {counter['n']}",
            email=f"driver{counter['n']}@example.com",
            experience_years=3,
            rating=4.0,
            availability=DriverAvailability.AVAILABLE,
            base_rate=50.0,
            per_km_rate=2.0,
        )
        fields.update(overrides)
        driver = Driver(**fields)
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver

    return _make


@pytest.fixture
def make_vehicle(db_session):
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        fields = dict(
            vehicle_type="Car",
            model="Toyota Axio",
            license_plate=f"CAB-{1000 + counter['n']}",
            seating_capacity=4,
            category=TripCategory.CASUAL,
            availability=VehicleAvailability.AVAILABLE,
            base_cost=30.0,
            per_km_cost=1.5,
            fuel_efficiency_km_per_liter=15.0,
            fuel_type="petrol",
        )
        fields.update(overrides)
        vehicle = Vehicle(**fields)
        db_session.add(vehicle)
        await db_session.commit()
        await db_session.refresh(vehicle)
        return vehicle

    return _make


@pytest.fixture
def make_trip(db_session):
    async def _make(**overrides):
        fields = dict(
            title="Airport transfer",
            category=TripCategory.CASUAL,
            origin="Colombo Fort",
            destination="Kandy",
            preferred_date=date(2026, 11, 2),
            preferred_time=time(8, 30),
            passenger_count=2,
            contact_name="Nimal Perera",
            contact_phone="+94771234567",
            contact_email="nimal@example.com",
            status=TripStatus.PENDING,
        )
        fields.update(overrides)
        trip = Trip(**fields)
        db_session.add(trip)
        await db_session.commit()
        await db_session.refresh(trip)
        return trip

    return _make
