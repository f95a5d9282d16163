"""
Tests for the public weather and search endpoints.
"""

import pytest

from weather_tracker.routers.weather import coordinate_id, format_coordinate


def test_get_weather(client, weather_service):
    response = client.get("/api/weather", params={"lat": "39.7392", "lon": "-104.9903", "name": "Denver"})
    assert response.status_code == 200
    data = response.json()
    assert data["location"] == {
        "id": "39.7392_-104.9903",
        "name": "Denver",
        "lat": 39.7392,
        "lon": -104.9903,
    }
    assert data["current"]["temperatureUnit"] == "F"
    assert "lastUpdated" in data
    assert len(weather_service.calls) == 1


def test_get_weather_default_name(client):
    data = client.get("/api/weather", params={"lat": "40", "lon": "-105.5"}).json()
    assert data["location"]["name"] == "40, -105.5"
    assert data["location"]["id"] == "40_-105.5"


@pytest.mark.parametrize("params", [{}, {"lat": "40"}, {"lon": "-105"}, {"lat": "", "lon": "-105"}])
def test_get_weather_missing_coordinates(client, params):
    response = client.get("/api/weather", params=params)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters: lat and lon"}


@pytest.mark.parametrize(
    "lat,lon",
    [("abc", "-105"), ("40", "west"), ("91", "0"), ("-90.5", "0"), ("0", "180.1"), ("nan", "0")],
)
def test_get_weather_invalid_coordinates(client, lat, lon):
    response = client.get("/api/weather", params={"lat": lat, "lon": lon})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coordinates"}


def test_get_weather_upstream_failure(client, weather_service):
    weather_service.failing["40_-105"] = "Failed to fetch weather data: timeout"

    response = client.get("/api/weather", params={"lat": "40", "lon": "-105"})
    assert response.status_code == 502
    assert response.json() == {"error": "Failed to fetch weather data: timeout"}


def test_get_multiple_weather(client, weather_service):
    weather_service.failing["b"] = "Failed to fetch weather data: 500"

    response = client.post(
        "/api/weather/multiple",
        json={
            "locations": [
                {"id": "a", "name": "Alpha", "lat": 40, "lon": -105},
                {"id": "b", "name": "Beta", "lat": 41, "lon": -106},
                {"lat": 0, "lon": 0},
            ]
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert [item["location"]["id"] for item in data] == ["a", "b", "0_0"]
    assert data[0]["error"] is None
    assert data[1]["error"] == "Failed to fetch weather data: 500"
    assert data[1]["current"] is None
    assert data[2]["location"]["name"] == "0, 0"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"locations": []},
        {"locations": "Denver"},
        {"locations": [{"name": "No coordinates"}]},
        {"locations": [{"lat": 100, "lon": 0}]},
    ],
)
def test_get_multiple_weather_invalid(client, body):
    response = client.post("/api/weather/multiple", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_search_locations(client, geocoding_service):
    geocoding_service.results = [
        {
            "lat": "39.7392358",
            "lon": "-104.990251",
            "display_name": "Denver, Colorado, United States",
            "address": {"city": "Denver", "state": "Colorado"},
        }
    ]

    response = client.get("/api/search", params={"query": "  denver "})
    assert response.status_code == 200
    assert response.json() == [
        {
            "id": "39.7392358_-104.990251",
            "name": "Denver, Colorado",
            "lat": 39.7392358,
            "lon": -104.990251,
            "displayName": "Denver, Colorado, United States",
        }
    ]
    assert geocoding_service.queries == ["denver"]


@pytest.mark.parametrize("params", [{}, {"query": ""}, {"query": "   "}])
def test_search_requires_query(client, geocoding_service, params):
    response = client.get("/api/search", params=params)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing or invalid query parameter"}
    assert geocoding_service.queries == []


def test_coordinate_formatting():
    assert format_coordinate(40.0) == "40"
    assert format_coordinate(-104.9903) == "-104.9903"
    assert coordinate_id(0.0, -0.5) == "0_-0.5"
