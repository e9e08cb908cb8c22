"""
HTTP client for the external geocoding lookup.

Speaks the Nominatim search API: `GET /search?format=json&q=...&countrycodes=..&limit=..`.
Any transport error, non-2xx status or response shape deviation is raised as
GeocodingUnavailable; the resolver absorbs it into a fallback coordinate.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from dispatch.app.core.config import settings
from dispatch.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger("dispatch.geo")


class GeocodingUnavailable(Exception):
    """The geocoding service could not produce an answer. Never leaves the geo package."""


@dataclass(frozen=True)
class GeocodeResult:
    lat: float
    lng: float
    display_name: str


def parse_search_results(payload) -> List[GeocodeResult]:
    """
    Convert a Nominatim JSON payload into results.

    Raises:
        GeocodingUnavailable: if the payload is not a list of {lat, lon} objects
    """
    if not isinstance(payload, list):
        raise GeocodingUnavailable(f"Unexpected geocoding payload type: {type(payload).__name__}")

    results = []
    for item in payload:
        try:
            results.append(GeocodeResult(
                lat=float(item["lat"]),
                lng=float(item["lon"]),
                display_name=str(item.get("display_name", "")),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingUnavailable(f"Malformed geocoding result: {e}") from e
    return results


class GeocodingClient:
    """
    Async geocoding client with a short timeout and a circuit breaker.

    One instance is shared by the application; resolvers are created per request.
    """

    def __init__(
        self,
        base_url: str = settings.geocoding_url,
        timeout_seconds: float = settings.geocoding_timeout_seconds,
        user_agent: str = settings.geocoding_user_agent,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.geocoding_failure_threshold,
            reset_timeout=settings.geocoding_reset_timeout_seconds,
        )
        self._http = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )

    async def search(self, text: str, country_filter: str, limit: int = 1) -> List[GeocodeResult]:
        """
        Look up a free-text location.

        Raises:
            GeocodingUnavailable: on timeout, transport error, bad status,
                malformed payload or an open circuit
        """
        try:
            return await self.circuit_breaker.call(self._search, text, country_filter, limit)
        except CircuitOpenError as e:
            raise GeocodingUnavailable("Geocoding circuit is open") from e
        except httpx.HTTPError as e:
            raise GeocodingUnavailable(f"Geocoding request failed: {type(e).__name__}") from e

    async def _search(self, text: str, country_filter: str, limit: int) -> List[GeocodeResult]:
        response = await self._http.get(
            self.base_url,
            params={"format": "json", "q": text, "countrycodes": country_filter, "limit": limit},
        )
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise GeocodingUnavailable("Geocoding response is not JSON") from e
        return parse_search_results(payload)

    async def aclose(self):
        await self._http.aclose()
