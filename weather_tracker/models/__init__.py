# Database models package

from weather_tracker.models.user import User

__all__ = [
    "User",
]
