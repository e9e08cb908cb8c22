"""
Location resolution for free-text trip addresses.

Resolution order:
1. Coordinates embedded in the text ("6.9271, 79.8612")
2. Per-request cache, then the shared geocode cache (if configured)
3. External geocoding lookup restricted to one country
4. Built-in table of known place names (case-insensitive substring)
5. Default coordinate (Colombo)

Resolution never fails: precision is traded for availability so pricing
is never blocked on geocoding.
"""

import logging
import re
from typing import Optional, Protocol, List

from dispatch.app.core.config import settings
from dispatch.app.domain.geo.distance import Coordinate, distance_km
from dispatch.app.domain.geo.coordinate_cache import CoordinateCache, SharedGeocodeCache
from dispatch.app.domain.geo.geocoding_client import GeocodeResult, GeocodingUnavailable

logger = logging.getLogger("dispatch.geo")


COORDINATE_PATTERN = re.compile(r"(-?\d+\.?\d*),\s*(-?\d+\.?\d*)")

# Known Sri Lankan place names; first substring match wins, so multi-word
# names are listed before any name they contain.
FALLBACK_LOCATIONS = {
    "colombo": Coordinate(6.9271, 79.8612),
    "kandy": Coordinate(7.2906, 80.6337),
    "galle": Coordinate(6.0535, 80.2210),
    "negombo": Coordinate(7.2084, 79.8380),
    "nuwara eliya": Coordinate(6.9497, 80.7891),
    "sigiriya": Coordinate(7.9568, 80.7598),
    "anuradhapura": Coordinate(8.3114, 80.4037),
    "polonnaruwa": Coordinate(7.9403, 81.0188),
    "trincomalee": Coordinate(8.5874, 81.2152),
    "batticaloa": Coordinate(7.7172, 81.7000),
    "jaffna": Coordinate(9.6615, 80.0255),
    "matara": Coordinate(5.9549, 80.5550),
    "ratnapura": Coordinate(6.6828, 80.4015),
    "badulla": Coordinate(6.9895, 81.0555),
    "ella": Coordinate(6.8667, 81.0500),
    "mirissa": Coordinate(5.9487, 80.4607),
    "unawatuna": Coordinate(6.0108, 80.2497),
    "bentota": Coordinate(6.4261, 79.9951),
    "hikkaduwa": Coordinate(6.1407, 80.1020),
    "dambulla": Coordinate(7.8731, 80.6511),
    "airport": Coordinate(7.1808, 79.8841),  # Bandaranaike International Airport
    "katunayake": Coordinate(7.1808, 79.8841),
}

# Country capital
DEFAULT_COORDINATE = Coordinate(6.9271, 79.8612)


class Geocoder(Protocol):
    async def search(self, text: str, country_filter: str, limit: int = 1) -> List[GeocodeResult]:
        ...


def parse_embedded_coordinate(location_text: str) -> Optional[Coordinate]:
    """Return the first decimal pair found in the text, if any."""
    match = COORDINATE_PATTERN.search(location_text)
    if not match:
        return None
    return Coordinate(lat=float(match.group(1)), lng=float(match.group(2)))


def fallback_coordinate(location_text: str) -> Coordinate:
    """Look the text up in the built-in place table, defaulting to the capital."""
    lowered = location_text.lower()
    for place, coordinate in FALLBACK_LOCATIONS.items():
        if place in lowered:
            return coordinate
    return DEFAULT_COORDINATE


class LocationResolver:
    """
    Resolves location strings to coordinates.

    Create one per request: the owned CoordinateCache is the request-scoped
    memo that prevents repeated network calls for the same string.
    """

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        country_filter: str = settings.geocoding_country_code,
        result_limit: int = settings.geocoding_result_limit,
        shared_cache: Optional[SharedGeocodeCache] = None,
    ):
        self.geocoder = geocoder
        self.country_filter = country_filter
        self.result_limit = result_limit
        self.shared_cache = shared_cache
        self.cache = CoordinateCache()

    async def resolve(self, location_text: str) -> Coordinate:
        """Resolve a location string. Never raises."""
        text = (location_text or "").strip()

        embedded = parse_embedded_coordinate(text)
        if embedded is not None:
            return embedded

        cached = self.cache.get(text)
        if cached is not None:
            return cached

        coordinate = await self._lookup(text)
        self.cache.set(text, coordinate)
        return coordinate

    async def resolve_route_distance(self, origin: str, destination: str) -> tuple[Coordinate, Coordinate, float]:
        """Resolve both ends of a route and return them with the distance between them."""
        origin_coordinate = await self.resolve(origin)
        destination_coordinate = await self.resolve(destination)
        return origin_coordinate, destination_coordinate, distance_km(origin_coordinate, destination_coordinate)

    async def _lookup(self, text: str) -> Coordinate:
        if not text:
            return DEFAULT_COORDINATE

        if self.shared_cache is not None:
            shared = await self.shared_cache.get(text, self.country_filter)
            if shared is not None:
                return shared

        if self.geocoder is not None:
            try:
                results = await self.geocoder.search(text, self.country_filter, self.result_limit)
            except GeocodingUnavailable as e:
                logger.warning(
                    "Geocoding unavailable, using fallback table",
                    extra={"location": text, "reason": str(e)}
                )
            else:
                if results:
                    first = results[0]
                    coordinate = Coordinate(lat=first.lat, lng=first.lng)
                    if self.shared_cache is not None:
                        await self.shared_cache.set(text, self.country_filter, coordinate)
                    return coordinate
                logger.info("Geocoding returned no results", extra={"location": text})

        return fallback_coordinate(text)
