"""
Shared test fixtures.

Each test gets its own SQLite file, an application built from explicit
settings and a fake weather provider in place of the NWS adapter.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from weather_tracker.config import Settings
from weather_tracker.core.exceptions import UpstreamError
from weather_tracker.database import Database
from weather_tracker.dependencies.services import get_geocoding_service, get_weather_service
from weather_tracker.main import create_app
from weather_tracker.schemas.weather import CurrentConditions, Location, WeatherSnapshot
from weather_tracker.services.geocoding import GeocodingService

TEST_SECRET_KEY = "test-secret-key-for-weather-tracker"


class FakeWeatherService:
    """Stands in for NWSService; records every lookup."""

    def __init__(self, failing: Optional[Dict[str, str]] = None):
        self.failing = failing or {}
        self.calls: List[Location] = []

    async def get_weather_data(self, location: Location) -> WeatherSnapshot:
        self.calls.append(location)
        if location.id in self.failing:
            raise UpstreamError(self.failing[location.id])
        return WeatherSnapshot(
            location=location,
            current=CurrentConditions(
                temperature=72,
                description="Sunny",
                humidity=40,
                wind_speed=5,
                wind_direction=180,
                visibility=10,
                pressure=30.01,
            ),
            forecast=[],
            last_updated=datetime.now(timezone.utc),
        )


class FakeGeocodingService(GeocodingService):
    """GeocodingService with canned Nominatim results instead of HTTP."""

    def __init__(self, results=None):
        super().__init__(client=None)
        self.results = results or []
        self.queries: List[str] = []

    async def search_location(self, query: str):
        self.queries.append(query)
        return self.results


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        ENVIRONMENT="test",
        SECRET_KEY=TEST_SECRET_KEY,
        SQLALCHEMY_DATABASE_URI=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        CREATE_TABLES_ON_STARTUP=True,
        BACKEND_CORS_ORIGINS="",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def weather_service():
    return FakeWeatherService()


@pytest.fixture
def geocoding_service():
    return FakeGeocodingService()


@pytest.fixture
def app(settings, weather_service, geocoding_service):
    application = create_app(settings)
    application.dependency_overrides[get_weather_service] = lambda: weather_service
    application.dependency_overrides[get_geocoding_service] = lambda: geocoding_service
    return application


@pytest.fixture
def client(app):
    """Test client fixture. Entering the client runs the lifespan handler."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def db(settings):
    """Async session on a freshly created schema."""
    database = Database(settings.SQLALCHEMY_DATABASE_URI)
    database.connect()
    await database.create_tables()

    async with database.session() as session:
        yield session

    await database.drop_tables()
    await database.disconnect()


def register(client, email="test@example.com", password="testpassword123", username="tester"):
    """Register a user through the API and return the response."""
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "username": username},
    )
