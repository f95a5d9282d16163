"""
Audit logging for security-sensitive operations.

Entries go to the ``weather_tracker.audit`` logger with the event fields
attached as ``extra`` so the JSON formatter emits them as keys.
"""

import logging
from typing import Any, Optional

from weather_tracker.utils.logging_config import get_logger

audit_logger = get_logger("weather_tracker.audit")


def _emit(level: int, message: str, action: str, **fields: Any) -> None:
    fields = {k: v for k, v in fields.items() if v is not None}
    summary = " ".join(f"{k}={v}" for k, v in fields.items())
    audit_logger.log(
        level,
        f"{message} [{action}] {summary}".rstrip(),
        extra={"action": action, **fields},
    )


def log_registration(email: str, user_id: Any, success: bool, ip: Optional[str] = None) -> None:
    _emit(logging.INFO, "User registration", "REGISTER", email=email, user_id=user_id, success=success, ip=ip)


def log_login(email: str, success: bool, user_id: Any = None, ip: Optional[str] = None) -> None:
    level = logging.INFO if success else logging.WARNING
    _emit(level, "User login", "LOGIN", email=email, user_id=user_id, success=success, ip=ip)


def log_logout(user_id: Any, ip: Optional[str] = None) -> None:
    _emit(logging.INFO, "User logout", "LOGOUT", user_id=user_id, ip=ip)


def log_city_added(user_id: Any, city_name: str, city_id: str) -> None:
    _emit(logging.INFO, "City added", "CITY_ADDED", user_id=user_id, city_name=city_name, city_id=city_id)


def log_city_removed(user_id: Any, city_id: str) -> None:
    _emit(logging.INFO, "City removed", "CITY_REMOVED", user_id=user_id, city_id=city_id)


def log_auth_failure(reason: str, ip: Optional[str] = None) -> None:
    _emit(logging.WARNING, "Authentication failure", "AUTH_FAILURE", reason=reason, ip=ip)
