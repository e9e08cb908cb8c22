"""
Caches of resolved coordinates.

CoordinateCache is owned by one LocationResolver and lives as long as the
request that created it. SharedGeocodeCache is an optional Redis tier that
keeps geocoder answers across requests, expiring after a TTL.
"""

import json
import logging
from typing import Dict, Optional

from dispatch.app.domain.geo.distance import Coordinate

logger = logging.getLogger("dispatch.geo")


class CoordinateCache:
    """Per-request memo keyed by the exact input string."""

    def __init__(self):
        self._entries: Dict[str, Coordinate] = {}

    def get(self, key: str) -> Optional[Coordinate]:
        return self._entries.get(key)

    def set(self, key: str, coordinate: Coordinate):
        self._entries[key] = coordinate

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class SharedGeocodeCache:
    """
    Redis-backed cache of geocoder results.

    Only successful geocoder answers are stored; fallback coordinates are not,
    so a recovered geocoding service is used again as soon as it is back.
    Redis errors are treated as cache misses.
    """

    KEY_PREFIX = "geocode:"

    def __init__(self, redis, ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, text: str, country_filter: str) -> str:
        return f"{self.KEY_PREFIX}{country_filter}:{text.strip().lower()}"

    async def get(self, text: str, country_filter: str) -> Optional[Coordinate]:
        try:
            raw = await self.redis.get(self._key(text, country_filter))
        except Exception as e:
            logger.warning("Geocode cache read failed", extra={"error": str(e)})
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return Coordinate(lat=float(data["lat"]), lng=float(data["lng"]))
        except (ValueError, KeyError, TypeError):
            return None

    async def set(self, text: str, country_filter: str, coordinate: Coordinate):
        payload = json.dumps({"lat": coordinate.lat, "lng": coordinate.lng})
        try:
            await self.redis.set(self._key(text, country_filter), payload, ex=self.ttl_seconds)
        except Exception as e:
            logger.warning("Geocode cache write failed", extra={"error": str(e)})
