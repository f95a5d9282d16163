"""
Async Python client for the Weather Tracker API.

Usage:
    async with WeatherTrackerClient("http://localhost:3000/api") as api:
        await api.login("user@example.com", "secret123")
        dashboard = await api.get_tracked_cities_weather()
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx


class ApiClientError(Exception):
    """Raised for non-2xx responses, carrying the server's ``error`` message."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class WeatherTrackerClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    The session cookie set by register/login is kept by the client's cookie
    jar; the returned token is also sent as a Bearer header.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token: Optional[str] = None
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WeatherTrackerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers.setdefault("Authorization", f"Bearer {self.token}")

        response = await self._client.request(method, path.lstrip("/"), headers=headers, **kwargs)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise ApiClientError(
                f"Server returned {response.status_code}: Expected JSON response but got {content_type or 'nothing'}",
                status_code=response.status_code,
            )

        data = response.json()
        if response.is_error:
            raise ApiClientError(
                data.get("error") or fallback,
                status_code=response.status_code,
                details=data.get("details"),
            )
        return data

    # Authentication

    async def register(self, email: str, password: str, username: str) -> Dict[str, Any]:
        data = await self._request(
            "POST",
            "auth/register",
            "Failed to register",
            json={"email": email, "password": password, "username": username},
        )
        self.token = data.get("token")
        return data

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST", "auth/login", "Failed to login", json={"email": email, "password": password}
        )
        self.token = data.get("token")
        return data

    async def logout(self) -> None:
        await self._request("POST", "auth/logout", "Failed to logout")
        self.token = None
        self._client.cookies.clear()

    async def get_current_user(self) -> Dict[str, Any]:
        data = await self._request("GET", "auth/me", "Failed to get user")
        return data["user"]

    # Weather and search

    async def search_locations(self, query: str) -> List[Dict[str, Any]]:
        """Search for locations. A blank query returns no results without a request."""
        if not query or not query.strip():
            return []
        return await self._request(
            "GET", "search", "Failed to search locations", params={"query": query.strip()}
        )

    async def get_weather(self, lat: float, lon: float, name: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"lat": lat, "lon": lon}
        if name:
            params["name"] = name
        return await self._request("GET", "weather", "Failed to fetch weather data", params=params)

    async def get_multiple_weather(self, locations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self._request(
            "POST", "weather/multiple", "Failed to fetch weather data", json={"locations": locations}
        )

    # Tracked cities

    async def get_tracked_cities(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "user/cities", "Failed to get tracked cities")
        return data["trackedCities"]

    async def add_city(self, city_id: str, name: str, lat: float, lon: float) -> List[Dict[str, Any]]:
        data = await self._request(
            "POST",
            "user/cities",
            "Failed to add city",
            json={"id": city_id, "name": name, "lat": lat, "lon": lon},
        )
        return data["trackedCities"]

    async def remove_city(self, city_id: str) -> List[Dict[str, Any]]:
        data = await self._request(
            "DELETE", f"user/cities/{quote(city_id, safe='')}", "Failed to remove city"
        )
        return data["trackedCities"]

    async def get_tracked_cities_weather(self) -> Dict[str, Any]:
        return await self._request("GET", "user/cities/weather", "Failed to get weather data")
