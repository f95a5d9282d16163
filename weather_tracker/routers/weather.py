"""
Weather router.

This module contains the public weather lookup and location search endpoints.
"""

import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from weather_tracker.core.exceptions import ValidationError
from weather_tracker.dependencies.services import get_geocoding_service, get_weather_service
from weather_tracker.schemas.weather import (
    Location,
    LocationResult,
    MultipleWeatherRequest,
    WeatherSnapshot,
)
from weather_tracker.services.geocoding import GeocodingService
from weather_tracker.services.nws import NWSService
from weather_tracker.services.tracked_cities import fetch_weather_for_locations

router = APIRouter(
    tags=["weather"],
    responses={400: {"description": "Invalid request"}},
)


def format_coordinate(value: float) -> str:
    """Render a coordinate without a trailing ".0" for whole numbers."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def coordinate_id(lat: float, lon: float) -> str:
    return f"{format_coordinate(lat)}_{format_coordinate(lon)}"


def _parse_coordinate(raw: str, low: float, high: float) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError("Invalid coordinates")
    if not math.isfinite(value) or not low <= value <= high:
        raise ValidationError("Invalid coordinates")
    return value


@router.get("/weather", response_model=WeatherSnapshot)
async def get_weather(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    name: Optional[str] = Query(None, description="Display name for the location"),
    weather: NWSService = Depends(get_weather_service),
):
    """
    Get weather data for a single location.

    Raises:
        ValidationError: If lat/lon are missing or invalid (400)
        UpstreamError: If the forecast cannot be fetched (502)
    """
    if not lat or not lon:
        raise ValidationError("Missing required parameters: lat and lon")

    latitude = _parse_coordinate(lat, -90, 90)
    longitude = _parse_coordinate(lon, -180, 180)

    location = Location(
        id=coordinate_id(latitude, longitude),
        name=name or f"{format_coordinate(latitude)}, {format_coordinate(longitude)}",
        lat=latitude,
        lon=longitude,
    )
    return await weather.get_weather_data(location)


@router.post("/weather/multiple", response_model=List[WeatherSnapshot])
async def get_multiple_weather(
    body: MultipleWeatherRequest,
    weather: NWSService = Depends(get_weather_service),
):
    """
    Get weather data for several locations at once.

    Locations are fetched concurrently; a failed lookup is reported in that
    location's ``error`` field without failing the others.
    """
    locations = [
        Location(
            id=loc.id or coordinate_id(loc.lat, loc.lon),
            name=loc.name or f"{format_coordinate(loc.lat)}, {format_coordinate(loc.lon)}",
            lat=loc.lat,
            lon=loc.lon,
        )
        for loc in body.locations
    ]
    return await fetch_weather_for_locations(weather, locations)


@router.get("/search", response_model=List[LocationResult])
async def search_locations(
    query: Optional[str] = Query(None, description="Free-text location query"),
    geocoding: GeocodingService = Depends(get_geocoding_service),
):
    """
    Search for US locations by name.

    Raises:
        ValidationError: If the query is missing or blank (400)
        UpstreamError: If the geocoding provider fails (502)
    """
    if not query or not query.strip():
        raise ValidationError("Missing or invalid query parameter")

    results = await geocoding.search_location(query.strip())
    return [geocoding.to_location(result) for result in results]
