"""
Tests for the National Weather Service adapter.

Upstream responses are served by ``httpx.MockTransport``.
"""

import json

import httpx
import pytest

from weather_tracker.core.exceptions import UpstreamError
from weather_tracker.schemas.weather import Location
from weather_tracker.services.nws import (
    NWSService,
    celsius_to_fahrenheit,
    kmh_to_mph,
    meters_to_miles,
    normalize_observation,
    pascals_to_inhg,
    round_half_up,
)

BASE_URL = "https://api.weather.gov"
DENVER = Location(id="39.7392_-104.9903", name="Denver", lat=39.7392, lon=-104.9903)

POINTS = {
    "properties": {
        "forecast": f"{BASE_URL}/gridpoints/BOU/62,60/forecast",
        "observationStations": f"{BASE_URL}/gridpoints/BOU/62,60/stations",
    }
}
FORECAST = {
    "properties": {
        "periods": [
            {
                "number": 1,
                "name": "Tonight",
                "startTime": "2024-01-01T18:00:00-07:00",
                "endTime": "2024-01-02T06:00:00-07:00",
                "isDaytime": False,
                "temperature": 21,
                "temperatureUnit": "F",
                "windSpeed": "5 to 10 mph",
                "windDirection": "SW",
                "icon": "https://api.weather.gov/icons/land/night/few",
                "shortForecast": "Mostly Clear",
                "detailedForecast": "Mostly clear, with a low around 21.",
            }
        ]
    }
}
STATIONS = {"features": [{"properties": {"stationIdentifier": "KDEN"}}]}
OBSERVATION = {
    "properties": {
        "timestamp": "2024-01-01T17:53:00+00:00",
        "textDescription": "Clear",
        "icon": "https://api.weather.gov/icons/land/day/skc",
        "temperature": {"value": 0},
        "relativeHumidity": {"value": 45.2},
        "windSpeed": {"value": 100},
        "windDirection": {"value": 230},
        "visibility": {"value": 16090},
        "barometricPressure": {"value": 101325},
    }
}


def make_service(routes, requests=None):
    """Build an NWSService whose client answers from ``routes`` (path -> (status, json))."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        status, body = routes.get(request.url.path, (404, {"detail": "not found"}))
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body)

    client = NWSService.build_client(
        BASE_URL, "test@example.com", transport=httpx.MockTransport(handler)
    )
    return NWSService(client)


def full_routes():
    return {
        "/points/39.7392,-104.9903": (200, POINTS),
        "/gridpoints/BOU/62,60/forecast": (200, FORECAST),
        "/gridpoints/BOU/62,60/stations": (200, STATIONS),
        "/stations/KDEN/observations/latest": (200, OBSERVATION),
    }


# Unit conversions
def test_conversions():
    assert celsius_to_fahrenheit(0) == 32
    assert celsius_to_fahrenheit(100) == 212
    assert round_half_up(kmh_to_mph(100)) == 62
    assert round(pascals_to_inhg(1000), 4) == 0.2953
    assert round(meters_to_miles(1609.34), 2) == 1.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(71.4) == 71


def test_normalize_observation():
    current = normalize_observation(OBSERVATION["properties"])
    assert current.temperature == 32
    assert current.temperature_unit == "F"
    assert current.description == "Clear"
    assert current.humidity == 45.2
    assert current.wind_speed == 62
    assert current.wind_direction == 230
    assert current.visibility == 10.0
    assert current.pressure == 29.92
    assert current.timestamp == "2024-01-01T17:53:00+00:00"


def test_normalize_observation_missing_values():
    current = normalize_observation(
        {
            "temperature": {"value": None},
            "windSpeed": None,
            "relativeHumidity": {"value": None},
            "textDescription": "",
        }
    )
    assert current.temperature == 0
    assert current.wind_speed == 0
    assert current.humidity == 0
    assert current.visibility == 0
    assert current.pressure == 0
    assert current.description == "No description available"


# Fetch chain
async def test_get_weather_data():
    requests = []
    service = make_service(full_routes(), requests)

    snapshot = await service.get_weather_data(DENVER)

    assert snapshot.location == DENVER
    assert snapshot.error is None
    assert snapshot.current.temperature == 32
    assert len(snapshot.forecast) == 1
    period = snapshot.forecast[0]
    assert period.name == "Tonight"
    assert period.is_daytime is False
    assert period.short_forecast == "Mostly Clear"
    assert period.wind_speed == "5 to 10 mph"
    assert period.temperature == 21
    assert isinstance(period.temperature, int)

    assert requests[0].headers["User-Agent"] == "(WeatherApp, test@example.com)"
    assert requests[0].headers["Accept"] == "application/geo+json"
    await service.client.aclose()


async def test_points_failure_raises_upstream_error():
    routes = full_routes()
    routes["/points/39.7392,-104.9903"] = (500, {"detail": "Unexpected Problem"})
    service = make_service(routes)

    with pytest.raises(UpstreamError) as exc_info:
        await service.get_weather_data(DENVER)
    assert exc_info.value.message.startswith("Failed to fetch weather data:")
    assert exc_info.value.status_code == 502
    await service.client.aclose()


async def test_forecast_failure_raises_upstream_error():
    routes = full_routes()
    routes["/gridpoints/BOU/62,60/forecast"] = (200, {"properties": {}})
    service = make_service(routes)

    with pytest.raises(UpstreamError):
        await service.get_weather_data(DENVER)
    await service.client.aclose()


async def test_transport_error_raises_upstream_error():
    routes = full_routes()
    routes["/points/39.7392,-104.9903"] = (0, httpx.ConnectTimeout("timed out"))
    service = make_service(routes)

    with pytest.raises(UpstreamError) as exc_info:
        await service.get_weather_data(DENVER)
    assert exc_info.value.message == "Failed to fetch weather data: timed out"
    await service.client.aclose()


@pytest.mark.parametrize(
    "path,response",
    [
        ("/gridpoints/BOU/62,60/stations", (503, {"detail": "down"})),
        ("/gridpoints/BOU/62,60/stations", (200, {"features": []})),
        ("/stations/KDEN/observations/latest", (404, {"detail": "none"})),
    ],
)
async def test_observation_failure_leaves_current_empty(path, response):
    routes = full_routes()
    routes[path] = response
    service = make_service(routes)

    snapshot = await service.get_weather_data(DENVER)
    assert snapshot.current is None
    assert len(snapshot.forecast) == 1
    assert snapshot.error is None
    await service.client.aclose()


async def test_forecast_temperatures_keep_provider_type():
    routes = full_routes()
    periods = [
        {**FORECAST["properties"]["periods"][0], "temperature": 45},
        {**FORECAST["properties"]["periods"][0], "number": 2, "temperature": 44.5},
    ]
    routes["/gridpoints/BOU/62,60/forecast"] = (200, {"properties": {"periods": periods}})
    service = make_service(routes)

    snapshot = await service.get_weather_data(DENVER)
    body = json.loads(snapshot.model_dump_json(by_alias=True))

    assert [p["temperature"] for p in body["forecast"]] == [45, 44.5]
    assert isinstance(body["forecast"][0]["temperature"], int)
    assert isinstance(body["forecast"][1]["temperature"], float)
    await service.client.aclose()
