"""
Weather data schemas.

This module contains Pydantic schemas for weather snapshots, locations and
search results.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field, model_validator

from weather_tracker.schemas.base import BaseSchema


class Location(BaseSchema):
    """A named point to fetch weather for."""
    id: str
    name: str
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class CurrentConditions(BaseSchema):
    """Latest station observation, normalized to US units."""
    temperature: int = Field(..., description="Temperature in °F")
    temperature_unit: str = "F"
    description: str
    icon: str = ""
    humidity: float = Field(..., description="Relative humidity percentage")
    wind_speed: int = Field(..., description="Wind speed in mph")
    wind_direction: float = Field(..., description="Wind direction in degrees")
    visibility: float = Field(..., description="Visibility in miles")
    pressure: float = Field(..., description="Barometric pressure in inHg")
    timestamp: Optional[str] = None


class ForecastPeriod(BaseSchema):
    """One forecast period as published by the provider."""
    number: Optional[int] = None
    name: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_daytime: bool = True
    temperature: Optional[Union[int, float]] = None
    temperature_unit: str = "F"
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    icon: Optional[str] = None
    short_forecast: str = ""
    detailed_forecast: str = ""


class WeatherSnapshot(BaseSchema):
    """Assembled weather result for a single location."""
    location: Location
    current: Optional[CurrentConditions] = None
    forecast: List[ForecastPeriod] = []
    last_updated: datetime
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_error_shape(self):
        if self.error is not None and (self.current is not None or self.forecast):
            raise ValueError("A snapshot with an error carries no current conditions or forecast")
        return self


class LocationQuery(BaseSchema):
    """Location entry accepted by the multiple-weather endpoint."""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    name: Optional[str] = None
    id: Optional[str] = None


class MultipleWeatherRequest(BaseSchema):
    locations: List[LocationQuery] = Field(..., min_length=1)


class LocationResult(BaseSchema):
    """Geocoding search result mapped into a trackable location."""
    id: str
    name: str
    lat: float
    lon: float
    display_name: str


class TrackedWeatherResponse(BaseSchema):
    weather_data: List[WeatherSnapshot]
    count: int
