"""
Tracked-city aggregation.

Adds and removes cities on an authenticated user's tracked list and fans
weather lookups out across every tracked city.
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_tracker.core.exceptions import (
    CityAlreadyTrackedError,
    InternalError,
    ValidationError,
    WeatherTrackerError,
)
from weather_tracker.crud.user import user as user_crud
from weather_tracker.models.user import User
from weather_tracker.schemas.cities import TrackedCity, TrackedCityCreate
from weather_tracker.schemas.weather import Location, TrackedWeatherResponse, WeatherSnapshot
from weather_tracker.utils import audit
from weather_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)


class WeatherProvider(Protocol):
    async def get_weather_data(self, location: Location) -> WeatherSnapshot:
        ...


async def _fetch_isolated(weather: WeatherProvider, location: Location) -> WeatherSnapshot:
    try:
        return await weather.get_weather_data(location)
    except Exception as e:
        logger.error(f"Error fetching weather for {location.name}: {e}")
        return WeatherSnapshot(
            location=location,
            current=None,
            forecast=[],
            last_updated=datetime.now(timezone.utc),
            error=(e.message if isinstance(e, WeatherTrackerError) else str(e)) or "Unknown error",
        )


async def fetch_weather_for_locations(
    weather: WeatherProvider, locations: Sequence[Location]
) -> List[WeatherSnapshot]:
    """
    Fetch weather for every location concurrently.

    A failed lookup becomes an error snapshot for that location only. The
    result order matches ``locations`` regardless of completion order.
    """
    return list(await asyncio.gather(*(_fetch_isolated(weather, loc) for loc in locations)))


class TrackedCityService:
    """Tracked-city operations for one request."""

    def __init__(self, db: AsyncSession, weather: WeatherProvider):
        self.db = db
        self.weather = weather

    async def add_city(self, user: User, city: TrackedCityCreate) -> List[TrackedCity]:
        """
        Add a city to the user's tracked list.

        Raises:
            CityAlreadyTrackedError: If the city id is already tracked (409)
            InternalError: For any other store failure
        """
        try:
            cities = await user_crud.add_tracked_city(self.db, user_id=user.id, city=city)
        except CityAlreadyTrackedError:
            raise
        except (WeatherTrackerError, SQLAlchemyError) as e:
            logger.error(f"Failed to add city {city.id} for user {user.id}: {e}")
            raise InternalError("Failed to add city")

        audit.log_city_added(user.id, city.name, city.id)
        return [TrackedCity.model_validate(c) for c in cities]

    async def remove_city(self, user: User, city_id: str) -> List[TrackedCity]:
        """
        Remove a city from the user's tracked list. Removing an untracked id succeeds.

        Raises:
            ValidationError: If ``city_id`` is empty
            InternalError: For any store failure
        """
        if not city_id or not city_id.strip():
            raise ValidationError("City ID is required")

        try:
            cities = await user_crud.remove_tracked_city(self.db, user_id=user.id, city_id=city_id)
        except (WeatherTrackerError, SQLAlchemyError) as e:
            logger.error(f"Failed to remove city {city_id} for user {user.id}: {e}")
            raise InternalError("Failed to remove city")

        audit.log_city_removed(user.id, city_id)
        return [TrackedCity.model_validate(c) for c in cities]

    async def list_cities(self, user: User) -> List[TrackedCity]:
        cities = await user_crud.get_tracked_cities(self.db, user_id=user.id)
        return [TrackedCity.model_validate(c) for c in cities]

    async def weather_for_tracked_cities(self, user: User) -> TrackedWeatherResponse:
        """
        Fetch weather for every city the user tracks.

        Returns an empty result without any upstream call when nothing is tracked.
        """
        cities = await self.list_cities(user)
        if not cities:
            return TrackedWeatherResponse(weather_data=[], count=0)

        locations = [
            Location(id=city.id, name=city.name, lat=city.lat, lon=city.lon)
            for city in cities
        ]
        weather_data = await fetch_weather_for_locations(self.weather, locations)
        return TrackedWeatherResponse(weather_data=weather_data, count=len(weather_data))
