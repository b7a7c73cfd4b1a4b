"""
Tests for configuration parsing, JWT helpers and localized text.
"""

import pytest
import uuid
from datetime import timedelta
from jose import JWTError, jwt

from app.config import Settings, parse_duration, settings
from app.models.user import UserRole
from app.utils.auth import (
    TokenExpired,
    create_access_token,
    hash_password,
    verify_password,
    verify_token
)
from app.utils.i18n import localize


class TestDurationParsing:
    """Test parse_duration."""

    @pytest.mark.parametrize("value, seconds", [
        ("30s", 30),
        ("15m", 900),
        ("2h", 7200),
        ("7d", 604800),
    ])
    def test_units(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "15", "m15", "1w", "1.5h", None])
    def test_invalid_falls_back_to_fifteen_minutes(self, value):
        assert parse_duration(value) == 900

    def test_settings_expiry(self):
        configured = Settings(jwt_access_expiry="1h")

        assert configured.access_token_expire_seconds == 3600


class TestSettings:
    """Test settings validation."""

    def test_database_url_gets_async_driver(self):
        assert Settings(database_url="postgresql://u:p@db/x").database_url == "postgresql+asyncpg://u:p@db/x"
        assert Settings(database_url="sqlite:///./dev.db").database_url == "sqlite+aiosqlite:///./dev.db"

    def test_short_secret_rejected(self):
        with pytest.raises(ValueError, match="at least 32 characters"):
            Settings(jwt_secret_key="too-short")

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValueError, match="Environment must be one of"):
            Settings(environment="qa")

    def test_test_environment_loaded(self):
        assert settings.is_testing is True
        assert settings.is_sqlite is True


class TestTokens:
    """Test JWT creation and verification."""

    def test_round_trip_claims(self):
        user_id = uuid.uuid4()
        token = create_access_token(user_id, "agent@example.com", UserRole.AGENT)

        payload = verify_token(token)

        assert payload.user_id == str(user_id)
        assert payload.email == "agent@example.com"
        assert payload.role == "AGENT"

    def test_default_lifetime(self):
        token = create_access_token(uuid.uuid4(), "a@example.com", "USER")
        claims = jwt.get_unverified_claims(token)

        assert claims["exp"] - claims["iat"] == settings.access_token_expire_seconds

    def test_expired(self):
        token = create_access_token(uuid.uuid4(), "a@example.com", "USER", expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpired):
            verify_token(token)

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "email": "a@example.com", "role": "ADMIN"},
            "some-other-secret-key-of-sufficient-length",
            algorithm="HS256"
        )

        with pytest.raises(JWTError):
            verify_token(token)

    def test_missing_claims(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="Invalid token payload"):
            verify_token(token)


class TestPasswords:
    """Test password hashing helpers."""

    def test_hash_and_verify(self):
        hashed = hash_password("securepassword123")

        assert verify_password("securepassword123", hashed) is True
        assert verify_password("securepassword124", hashed) is False

    def test_short_password(self):
        with pytest.raises(ValueError):
            hash_password("1234567")


class TestLocalize:
    """Test localized text selection."""

    def test_requested_locale(self):
        assert localize({"en": "Flat", "ru": "Квартира"}, "ru") == "Квартира"

    def test_falls_back_to_default(self):
        assert localize({"en": "Flat", "ru": "Квартира"}, "uz") == "Flat"

    def test_falls_back_to_any_available(self):
        assert localize({"uz": "Kvartira"}, "ru") == "Kvartira"

    def test_empty(self):
        assert localize(None) == ""
        assert localize({}) == ""
        assert localize({"en": "", "ru": None}) == ""
