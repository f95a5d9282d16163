"""
Service dependencies.

Application-scoped resources (settings, provider clients) are created in the
lifespan handler and kept on ``app.state``; these functions hand them to
route handlers and make them overridable in tests.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from weather_tracker.config import Settings
from weather_tracker.database import get_db
from weather_tracker.services.geocoding import GeocodingService
from weather_tracker.services.nws import NWSService
from weather_tracker.services.tracked_cities import TrackedCityService


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency for the settings the app was created with."""
    return request.app.state.settings


def get_weather_service(request: Request) -> NWSService:
    """FastAPI dependency for the weather adapter."""
    return request.app.state.weather_service


def get_geocoding_service(request: Request) -> GeocodingService:
    """FastAPI dependency for the geocoding adapter."""
    return request.app.state.geocoding_service


def get_tracked_city_service(
    db: AsyncSession = Depends(get_db),
    weather: NWSService = Depends(get_weather_service),
) -> TrackedCityService:
    """FastAPI dependency for the tracked-city aggregator."""
    return TrackedCityService(db, weather)
