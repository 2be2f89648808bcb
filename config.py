"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
AppSettings composes the sub-configs so callers only ever build one object.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "healthmate"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "healthmate"
    jwt_audience: str = "healthmate.api"
    access_token_ttl_seconds: int = 86400

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_ttl_seconds: int = 300
    cleanup_interval_seconds: float = 300.0
    cleanup_enabled: bool = True

    # Upper bounds for calls into the notifier and the account store
    notifier_timeout_seconds: float = 10.0
    store_timeout_seconds: float = 5.0


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # "zeptomail" in deployments, "console" logs the code instead of mailing it
    email_provider: str = "console"
    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@healthmate.app"
    zepto_from_name: str = "HealthMate"


class DiagnosisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout_seconds: float = 30.0


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "HealthMate API"

    # The web client runs on the Vite dev server
    cors_origins: list[str] = ["http://localhost:5173"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    auth: Optional[AuthSettings] = None
    email: Optional[EmailSettings] = None
    diagnosis: Optional[DiagnosisSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.auth is None:
            self.auth = AuthSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.diagnosis is None:
            self.diagnosis = DiagnosisSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
