"""
Geocoding adapter.

Searches Nominatim (OpenStreetMap) for US locations, since only US
coordinates are served by the National Weather Service.
"""

from typing import Any, Dict, List, Optional

import httpx

from weather_tracker.core.exceptions import UpstreamError
from weather_tracker.schemas.weather import LocationResult
from weather_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

MAX_RESULTS = 5


class GeocodingService:
    """Client for the Nominatim search API."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @staticmethod
    def build_client(
        base_url: str,
        user_agent: str = "WeatherApp/1.0",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
            transport=transport,
        )

    async def search_location(self, query: str) -> List[Dict[str, Any]]:
        """
        Search for locations by free-text query.

        Returns:
            Up to five raw Nominatim results that carry coordinates

        Raises:
            UpstreamError: On any transport or provider error
        """
        try:
            response = await self.client.get(
                "/search",
                params={
                    "q": query,
                    "format": "json",
                    "addressdetails": 1,
                    "countrycodes": "us",
                    "limit": MAX_RESULTS,
                },
            )
            response.raise_for_status()
            results = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error searching location '{query}': {e}")
            raise UpstreamError("Failed to search location")

        if not isinstance(results, list):
            logger.error(f"Unexpected geocoding response for '{query}': {type(results).__name__}")
            raise UpstreamError("Failed to search location")

        located = [result for result in results if self._has_coordinates(result)]
        if len(located) < len(results):
            logger.warning(
                f"Dropped {len(results) - len(located)} geocoding result(s) without coordinates for '{query}'"
            )
        return located[:MAX_RESULTS]

    @staticmethod
    def _has_coordinates(result: Any) -> bool:
        if not isinstance(result, dict):
            return False
        try:
            float(result["lat"])
            float(result["lon"])
        except (KeyError, TypeError, ValueError):
            return False
        return True

    @staticmethod
    def format_location_name(result: Dict[str, Any]) -> str:
        """Format a result as "City, State", falling back to the full display name."""
        address = result.get("address") or {}
        city = address.get("city") or address.get("town") or address.get("village") or ""
        state = address.get("state") or ""

        if city and state:
            return f"{city}, {state}"
        if city or state:
            return city or state
        return result.get("display_name", "")

    def to_location(self, result: Dict[str, Any]) -> LocationResult:
        """Map a raw result to a trackable location."""
        return LocationResult(
            id=f"{result['lat']}_{result['lon']}",
            name=self.format_location_name(result),
            lat=float(result["lat"]),
            lon=float(result["lon"]),
            display_name=result.get("display_name", ""),
        )
