"""
Tests for password hashing and session tokens.
"""

from datetime import timedelta

import pytest
from jose import jwt

from weather_tracker.config import Settings
from weather_tracker.core.exceptions import InvalidTokenError, TokenExpiredError
from weather_tracker.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    hash_and_store,
    verify_password,
)
from weather_tracker.models.user import User


@pytest.fixture
def token_settings():
    return Settings(SECRET_KEY="unit-test-secret", ENVIRONMENT="test")


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert hashed.startswith("$2")
    assert verify_password("s3cret!", hashed)
    assert not verify_password("other", hashed)


def test_hash_and_store_sets_hash():
    user = User(email="a@example.com", username="abc")
    hash_and_store(user, "plaintext")
    assert user.hashed_password
    assert verify_password("plaintext", user.hashed_password)


def test_token_claims(token_settings):
    token = create_access_token(42, token_settings)
    claims = jwt.decode(token, "unit-test-secret", algorithms=["HS256"])

    assert claims["sub"] == "42"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60
    assert decode_access_token(token, token_settings) == 42


def test_expired_token(token_settings):
    token = create_access_token(1, token_settings, expires_delta=timedelta(seconds=-1))
    with pytest.raises(TokenExpiredError) as exc_info:
        decode_access_token(token, token_settings)
    assert exc_info.value.message == "Token expired"
    assert exc_info.value.status_code == 401


def test_tampered_token(token_settings):
    token = create_access_token(1, token_settings)
    with pytest.raises(InvalidTokenError):
        decode_access_token(token[:-2] + "xx", token_settings)


def test_wrong_secret(token_settings):
    token = create_access_token(1, token_settings)
    other = token_settings.model_copy(update={"SECRET_KEY": "different"})
    with pytest.raises(InvalidTokenError):
        decode_access_token(token, other)


def test_non_numeric_subject(token_settings):
    token = jwt.encode({"sub": "alice"}, "unit-test-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        decode_access_token(token, token_settings)
