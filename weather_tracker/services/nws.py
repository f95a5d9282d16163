"""
National Weather Service adapter.

Fetches forecast and latest observation data from api.weather.gov and
assembles a ``WeatherSnapshot`` with units normalized for US display.

Fetch chain:
    1. /points/{lat},{lon}          -> forecast URL + observation stations URL
    2. forecast URL                 -> forecast periods
    3. observation stations URL     -> first station identifier
    4. /stations/{id}/observations/latest -> current conditions

Failures in steps 1-2 fail the whole lookup; failures in steps 3-4 leave
``current`` empty.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from weather_tracker.core.exceptions import UpstreamError
from weather_tracker.schemas.weather import (
    CurrentConditions,
    ForecastPeriod,
    Location,
    WeatherSnapshot,
)
from weather_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

KMH_TO_MPH = 0.621371
METERS_TO_MILES = 0.000621371
PASCALS_TO_INHG = 0.0002953


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def kmh_to_mph(kmh: float) -> float:
    return kmh * KMH_TO_MPH


def meters_to_miles(meters: float) -> float:
    return meters * METERS_TO_MILES


def pascals_to_inhg(pascals: float) -> float:
    return pascals * PASCALS_TO_INHG


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _quantity(properties: Dict[str, Any], key: str) -> Optional[float]:
    """Read ``properties[key]["value"]`` from an NWS quantitative value."""
    quantity = properties.get(key) or {}
    return quantity.get("value")


def normalize_observation(properties: Dict[str, Any]) -> CurrentConditions:
    """
    Convert the ``properties`` of an NWS observation into current conditions.

    Missing measurements become 0 rather than an error.
    """
    temp_c = _quantity(properties, "temperature")
    wind_kmh = _quantity(properties, "windSpeed")
    visibility_m = _quantity(properties, "visibility")
    pressure_pa = _quantity(properties, "barometricPressure")

    return CurrentConditions(
        temperature=round_half_up(celsius_to_fahrenheit(temp_c)) if temp_c is not None else 0,
        temperature_unit="F",
        description=properties.get("textDescription") or "No description available",
        icon=properties.get("icon") or "",
        humidity=_quantity(properties, "relativeHumidity") or 0,
        wind_speed=round_half_up(kmh_to_mph(wind_kmh)) if wind_kmh is not None else 0,
        wind_direction=_quantity(properties, "windDirection") or 0,
        visibility=round(meters_to_miles(visibility_m), 1) if visibility_m is not None else 0,
        pressure=round(pascals_to_inhg(pressure_pa), 2) if pressure_pa is not None else 0,
        timestamp=properties.get("timestamp"),
    )


class NWSService:
    """
    Client for the api.weather.gov REST API.

    The ``httpx.AsyncClient`` is owned by the caller; ``build_client``
    creates one configured with the headers and timeout NWS expects.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @staticmethod
    def build_client(
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            headers={
                # NWS requires an identifying User-Agent
                "User-Agent": f"(WeatherApp, {user_agent})",
                "Accept": "application/geo+json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def get_weather_data(self, location: Location) -> WeatherSnapshot:
        """
        Get weather data for a specific location.

        Raises:
            UpstreamError: If the grid point or forecast lookup fails
        """
        logger.info(f"Fetching weather for {location.name}")

        try:
            points = await self._get_json(f"/points/{location.lat:.4f},{location.lon:.4f}")
            point_properties = points["properties"]
            forecast = await self._get_json(point_properties["forecast"])
            periods = [
                ForecastPeriod.model_validate(period)
                for period in forecast["properties"]["periods"]
            ]
        except Exception as e:
            logger.error(f"Error fetching weather data for {location.name}: {e}")
            raise UpstreamError(f"Failed to fetch weather data: {str(e) or e.__class__.__name__}")

        current = await self._get_current_conditions(
            point_properties.get("observationStations"), location
        )

        return WeatherSnapshot(
            location=location,
            current=current,
            forecast=periods,
            last_updated=datetime.now(timezone.utc),
        )

    async def _get_current_conditions(
        self, stations_url: Optional[str], location: Location
    ) -> Optional[CurrentConditions]:
        if not stations_url:
            return None
        try:
            stations = await self._get_json(stations_url)
            features: List[Dict[str, Any]] = stations.get("features") or []
            if not features:
                return None
            station_id = features[0]["properties"]["stationIdentifier"]
            observation = await self._get_json(f"/stations/{station_id}/observations/latest")
            return normalize_observation(observation["properties"])
        except Exception as e:
            logger.warning(f"Could not fetch current observations for {location.name}: {e}")
            return None

    async def _get_json(self, url: str) -> Any:
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()
