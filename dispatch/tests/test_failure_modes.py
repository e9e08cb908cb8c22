"""
Failure Injection Tests.

Validates resilience against geocoding and cache failures.
"""

import httpx
import pytest

from dispatch.app.core.reliability import CircuitBreaker, CircuitOpenError
from dispatch.app.domain.geo.geocoding_client import GeocodingClient
from dispatch.app.domain.geo.location_resolver import LocationResolver, FALLBACK_LOCATIONS


@pytest.mark.asyncio
async def test_circuit_breaker_activates():
    """Test that circuit breaker opens after threshold failures."""
    cb = CircuitBreaker(failure_threshold=2, reset_timeout=1)

    async def failing_func():
        raise ValueError("Boom")

    for _ in range(2):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    # Threshold reached
    with pytest.raises(CircuitOpenError):
        await cb.call(failing_func)
    assert cb.state == "OPEN"


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_recovers(mocker):
    cb = CircuitBreaker(failure_threshold=1, reset_timeout=30)
    clock = mocker.patch("dispatch.app.core.reliability.time.time", return_value=1000.0)

    async def failing_func():
        raise ValueError("Boom")

    async def ok_func():
        return "ok"

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    with pytest.raises(CircuitOpenError):
        await cb.call(ok_func)

    clock.return_value = 1031.0
    assert await cb.call(ok_func) == "ok"
    assert cb.state == "CLOSED"
    assert cb.failures == 0


@pytest.mark.asyncio
async def test_half_open_failure_reopens(mocker):
    cb = CircuitBreaker(failure_threshold=3, reset_timeout=30)
    clock = mocker.patch("dispatch.app.core.reliability.time.time", return_value=1000.0)

    async def failing_func():
        raise ValueError("Boom")

    for _ in range(3):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    clock.return_value = 1031.0
    with pytest.raises(ValueError):
        await cb.call(failing_func)
    assert cb.state == "OPEN"


@pytest.mark.asyncio
async def test_open_circuit_skips_geocoding_service():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    client = GeocodingClient(
        base_url="https://geo.test/search",
        transport=httpx.MockTransport(handler),
        circuit_breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60),
    )
    resolver = LocationResolver(geocoder=client)
    try:
        for place in ("Kandy", "Galle", "Negombo", "Matara"):
            assert await resolver.resolve(place) == FALLBACK_LOCATIONS[place.lower()]
    finally:
        await client.aclose()

    # Two failures open the circuit; later lookups never reach the service
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_geocoding_outage_does_not_block_estimates(client, mocker):
    """Cost estimates still succeed, on fallback coordinates, when geocoding is down."""
    from dispatch.app.main import app
    from dispatch.app.core.dependencies import get_location_resolver
    from dispatch.app.domain.geo.geocoding_client import GeocodingUnavailable

    geocoder = mocker.Mock()
    geocoder.search = mocker.AsyncMock(side_effect=GeocodingUnavailable("down"))

    async def outage_resolver():
        return LocationResolver(geocoder=geocoder)

    app.dependency_overrides[get_location_resolver] = outage_resolver

    driver = (await client.post("/v1/drivers", json={
        "name": "Kasun", "email": "kasun@example.com", "availability": "available"
    })).json()
    vehicle = (await client.post("/v1/vehicles", json={"vehicle_type": "Van", "seating_capacity": 8})).json()
    trip = (await client.post("/v1/trips", json={
        "title": "Hill country", "category": "Tour", "origin": "Colombo", "destination": "Nuwara Eliya",
        "preferred_date": "2026-12-01", "preferred_time": "06:00", "passenger_count": 3,
        "contact_name": "Ayesha", "contact_phone": "0771112222", "contact_email": "ayesha@example.com"
    })).json()

    response = await client.post(
        f"/v1/trips/{trip['trip_id']}/estimate-cost",
        json={"driver_id": driver["id"], "vehicle_id": vehicle["id"]}
    )

    assert response.status_code == 200
    assert response.json()["breakdown"]["distance_km"] > 0
    assert geocoder.search.await_count == 2


@pytest.mark.asyncio
async def test_redis_outage_is_a_cache_miss(mocker, mock_redis):
    from dispatch.app.domain.geo.coordinate_cache import SharedGeocodeCache
    from dispatch.app.domain.geo.distance import Coordinate

    mocker.patch.object(mock_redis, "set", side_effect=ConnectionError("redis down"))
    shared = SharedGeocodeCache(mock_redis, ttl_seconds=60)

    await shared.set("Kandy", "lk", Coordinate(7.29, 80.63))
    assert await shared.get("Kandy", "lk") is None


@pytest.mark.asyncio
async def test_redis_outage_reported_by_health(client, mocker):
    from redis.exceptions import ConnectionError as RedisConnectionError
    from dispatch.app.core import redis_client as redis_module
    from dispatch.app.core.config import settings

    mocker.patch.object(settings, "geocode_cache_enabled", True)
    ping = mocker.patch.object(
        redis_module.redis_client, "ping",
        new_callable=mocker.AsyncMock, side_effect=RedisConnectionError("refused")
    )

    assert await redis_module.ping_redis() is False

    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "disabled"
    assert ping.await_count == 2

    ping.side_effect = None
    ping.return_value = True
    assert (await client.get("/health")).json()["redis"] == "enabled"
