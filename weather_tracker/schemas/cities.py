"""
Tracked-city schemas.
"""

from datetime import datetime
from typing import List

from pydantic import Field

from weather_tracker.schemas.base import BaseSchema


class TrackedCityCreate(BaseSchema):
    """Schema for adding a city to the tracked list."""
    id: str = Field(..., min_length=1, description="Provider-assigned or '<lat>_<lon>' identifier")
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class TrackedCity(TrackedCityCreate):
    """A tracked city as stored on the user."""
    added_at: datetime


class TrackedCitiesResponse(BaseSchema):
    tracked_cities: List[TrackedCity]
    count: int


class AddCityResponse(BaseSchema):
    message: str
    city: TrackedCityCreate
    tracked_cities: List[TrackedCity]


class RemoveCityResponse(BaseSchema):
    message: str
    tracked_cities: List[TrackedCity]
