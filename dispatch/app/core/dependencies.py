"""
Geocoding dependencies for FastAPI.

The geocoding client (and its circuit breaker) lives for the whole process;
a LocationResolver, and with it the coordinate cache, lives for one request.
"""

from typing import Optional
from fastapi import Depends

from dispatch.app.core.config import settings
from dispatch.app.core.redis_client import get_redis
from dispatch.app.domain.geo.coordinate_cache import SharedGeocodeCache
from dispatch.app.domain.geo.geocoding_client import GeocodingClient
from dispatch.app.domain.geo.location_resolver import LocationResolver

_geocoding_client: Optional[GeocodingClient] = None


def get_geocoding_client() -> GeocodingClient:
    """Return the process-wide geocoding client, creating it on first use."""
    global _geocoding_client
    if _geocoding_client is None:
        _geocoding_client = GeocodingClient()
    return _geocoding_client


async def close_geocoding_client():
    global _geocoding_client
    if _geocoding_client is not None:
        await _geocoding_client.aclose()
        _geocoding_client = None


async def get_location_resolver(
    geocoder: GeocodingClient = Depends(get_geocoding_client),
    redis=Depends(get_redis)
) -> LocationResolver:
    """
    FastAPI dependency building a fresh resolver for the current request.

    The Redis tier is only attached when geocode_cache_enabled is set.
    """
    shared_cache = None
    if settings.geocode_cache_enabled:
        shared_cache = SharedGeocodeCache(redis, ttl_seconds=settings.geocode_cache_ttl_seconds)

    return LocationResolver(
        geocoder=geocoder,
        country_filter=settings.geocoding_country_code,
        result_limit=settings.geocoding_result_limit,
        shared_cache=shared_cache,
    )
