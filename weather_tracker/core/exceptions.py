"""
Exception classes for the Weather Tracker backend.

Every error the application raises on purpose derives from
``WeatherTrackerError``, which knows the HTTP status it maps to and how to
render itself as a JSON error body.
"""

from typing import Any, Optional


class WeatherTrackerError(Exception):
    """
    Base exception for all Weather Tracker errors.

    Attributes:
        message: Safe, user-facing message
        status_code: HTTP status the error is rendered with
        details: Optional structured details (e.g. field-level issues)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(WeatherTrackerError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(WeatherTrackerError):
    """Missing, expired or invalid session."""

    status_code = 401


class TokenExpiredError(AuthenticationError):
    def __init__(self, message: str = "Token expired"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class ConflictError(WeatherTrackerError):
    """Uniqueness violation."""

    status_code = 409


class DuplicateEmailError(ConflictError):
    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class DuplicateUsernameError(ConflictError):
    def __init__(self, message: str = "Username already exists"):
        super().__init__(message)


class CityAlreadyTrackedError(ConflictError):
    def __init__(self, message: str = "City already tracked"):
        super().__init__(message)


class NotFoundError(WeatherTrackerError):
    """
    Referenced user or resource is absent.

    Rendered as 500: reaching this with a verified session means the session
    and the store disagree, not that the client sent bad input.
    """

    status_code = 500


class UpstreamError(WeatherTrackerError):
    """Weather or geocoding provider failure."""

    status_code = 502


class InternalError(WeatherTrackerError):
    """Unexpected failure with a safe message."""

    status_code = 500
