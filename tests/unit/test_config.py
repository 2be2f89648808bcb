"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
)


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "healthmate"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# JWTSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "JWT_ISSUER",
            "JWT_AUDIENCE",
            "ACCESS_TOKEN_TTL_SECONDS",
            "JWT_PRIVATE_KEY",
            "JWT_PUBLIC_KEY",
            "JWT_SECRET",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_issuer == "healthmate"
        assert s.jwt_audience == "healthmate.api"
        assert s.access_token_ttl_seconds == 86400
        assert s.jwt_secret == ""


@pytest.mark.parametrize(
    "private_key, public_key, expected",
    [
        ("private", "public", True),
        ("private", None, False),
        (None, None, False),
    ],
    ids=["keys_present", "public_missing", "keys_absent"],
)
def test_jwt_use_rs256(monkeypatch, private_key, public_key, expected):
    for var, value in (("JWT_PRIVATE_KEY", private_key), ("JWT_PUBLIC_KEY", public_key)):
        if value:
            monkeypatch.setenv(var, value)
        else:
            monkeypatch.delenv(var, raising=False)
    assert JWTSettings().use_rs256 is expected


# ---------------------------------------------------------------------------
# AuthSettings / EmailSettings
# ---------------------------------------------------------------------------


class TestAuthSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "OTP_TTL_SECONDS",
            "CLEANUP_INTERVAL_SECONDS",
            "CLEANUP_ENABLED",
            "NOTIFIER_TIMEOUT_SECONDS",
            "STORE_TIMEOUT_SECONDS",
        ):
            monkeypatch.delenv(var, raising=False)
        s = AuthSettings()
        assert s.otp_ttl_seconds == 300
        assert s.cleanup_interval_seconds == 300
        assert s.cleanup_enabled is True
        assert s.notifier_timeout_seconds == 10
        assert s.store_timeout_seconds == 5

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OTP_TTL_SECONDS", "600")
        monkeypatch.setenv("CLEANUP_ENABLED", "false")
        s = AuthSettings()
        assert s.otp_ttl_seconds == 600
        assert s.cleanup_enabled is False


def test_email_provider_defaults_to_console(monkeypatch):
    monkeypatch.delenv("EMAIL_PROVIDER", raising=False)
    assert EmailSettings().email_provider == "console"


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "jwt", "auth", "email", "diagnosis", "logging", "sentry"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["http://localhost:5173"]

    def test_explicit_sub_config_kept(self, with_mongo):
        auth = AuthSettings(otp_ttl_seconds=42)
        assert AppSettings(auth=auth).auth.otp_ttl_seconds == 42
