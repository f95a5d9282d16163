"""
Tracked-cities router.

Every endpoint here requires an authenticated session.
"""

from fastapi import APIRouter, Depends, status

from weather_tracker.dependencies.auth import get_current_user
from weather_tracker.dependencies.services import get_tracked_city_service
from weather_tracker.models.user import User
from weather_tracker.schemas.cities import (
    AddCityResponse,
    RemoveCityResponse,
    TrackedCitiesResponse,
    TrackedCityCreate,
)
from weather_tracker.schemas.weather import TrackedWeatherResponse
from weather_tracker.services.tracked_cities import TrackedCityService

router = APIRouter(
    prefix="/user",
    tags=["tracked cities"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Unauthorized"}},
)


@router.get("/cities", response_model=TrackedCitiesResponse)
async def get_tracked_cities(
    current_user: User = Depends(get_current_user),
    service: TrackedCityService = Depends(get_tracked_city_service),
):
    """Get all tracked cities for the user."""
    cities = await service.list_cities(current_user)
    return TrackedCitiesResponse(tracked_cities=cities, count=len(cities))


@router.post("/cities", response_model=AddCityResponse, status_code=status.HTTP_201_CREATED)
async def add_city(
    city_in: TrackedCityCreate,
    current_user: User = Depends(get_current_user),
    service: TrackedCityService = Depends(get_tracked_city_service),
):
    """
    Add a city to the user's tracked list.

    Raises:
        CityAlreadyTrackedError: If the city is already tracked (409)
    """
    cities = await service.add_city(current_user, city_in)
    return AddCityResponse(
        message="City added successfully",
        city=city_in,
        tracked_cities=cities,
    )


@router.get("/cities/weather", response_model=TrackedWeatherResponse)
async def get_tracked_cities_weather(
    current_user: User = Depends(get_current_user),
    service: TrackedCityService = Depends(get_tracked_city_service),
):
    """Get weather data for every tracked city."""
    return await service.weather_for_tracked_cities(current_user)


@router.delete("/cities/{city_id}", response_model=RemoveCityResponse)
async def remove_city(
    city_id: str,
    current_user: User = Depends(get_current_user),
    service: TrackedCityService = Depends(get_tracked_city_service),
):
    """Remove a city from the user's tracked list."""
    cities = await service.remove_city(current_user, city_id)
    return RemoveCityResponse(message="City removed successfully", tracked_cities=cities)


@router.delete("/cities", response_model=RemoveCityResponse, include_in_schema=False)
async def remove_city_without_id(
    current_user: User = Depends(get_current_user),
    service: TrackedCityService = Depends(get_tracked_city_service),
):
    """Reject removal requests that name no city."""
    cities = await service.remove_city(current_user, "")
    return RemoveCityResponse(message="City removed successfully", tracked_cities=cities)
