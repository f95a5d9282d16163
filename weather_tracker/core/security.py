"""
Security utilities.

This module contains password hashing and session token operations.
Password hashing is always an explicit call made by the CRUD layer.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, TYPE_CHECKING

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext

from weather_tracker.core.exceptions import InvalidTokenError, TokenExpiredError

if TYPE_CHECKING:
    from weather_tracker.config import Settings
    from weather_tracker.models.user import User

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """
    Hash a password.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hashed password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def hash_and_store(user: "User", plaintext: str) -> None:
    """Hash ``plaintext`` and set it as the user's stored password hash."""
    user.hashed_password = get_password_hash(plaintext)


def create_access_token(
    user_id: int,
    settings: "Settings",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed session token for a user.

    Args:
        user_id: ID of the authenticated user
        settings: Application settings (secret, algorithm, default expiry)
        expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT token
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: "Settings") -> int:
    """
    Verify a session token and return the user ID it was issued for.

    Raises:
        TokenExpiredError: If the token's expiry has passed
        InvalidTokenError: If the signature or claims are invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise InvalidTokenError()
