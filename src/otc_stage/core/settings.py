"""Application settings and configuration.

This module defines all configuration options for the OTC Stage service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="OTC Stage", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Key-value store for challenges and rate-limit markers
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    store_backend: Literal["redis", "memory"] = Field(
        default="redis",
        alias="OTP_STORE_BACKEND",
    )

    # One-time code lifecycle
    otp_expiry_minutes: int = Field(default=5, ge=1, alias="OTP_EXPIRY_MINUTES")
    otp_rate_limit_seconds: int = Field(default=60, ge=1, alias="OTP_RATE_LIMIT_SECONDS")

    # Delivery retry policy
    otp_delivery_attempts: int = Field(default=3, ge=1, alias="OTP_DELIVERY_ATTEMPTS")
    otp_backoff_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        alias="OTP_BACKOFF_BASE_SECONDS",
    )
    otp_backoff_cap_seconds: float = Field(
        default=5.0,
        ge=0.0,
        alias="OTP_BACKOFF_CAP_SECONDS",
    )

    # bcrypt cost factor (log2 rounds)
    otp_hash_rounds: int = Field(default=10, ge=4, le=31, alias="OTP_HASH_ROUNDS")

    # Email delivery
    email_mode: Literal["smtp", "api", "console"] = Field(default="smtp", alias="EMAIL_MODE")
    email_host: str = Field(default="localhost", alias="EMAIL_HOST")
    email_port: int = Field(default=465, alias="EMAIL_PORT")
    email_use_ssl: bool = Field(default=True, alias="EMAIL_USE_SSL")
    email_from: str = Field(default="no-reply@example.com", alias="EMAIL_FROM")
    email_from_name: str = Field(default="OTC Stage", alias="EMAIL_FROM_NAME")
    email_password: str | None = Field(default=None, alias="EMAIL_PASSWORD")
    email_api_url: str = Field(
        default="https://api.brevo.com/v3/smtp/email",
        alias="EMAIL_API_URL",
    )
    email_api_key: str | None = Field(default=None, alias="EMAIL_API_KEY")
    email_timeout_seconds: float = Field(default=15.0, alias="EMAIL_TIMEOUT_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def otp_expiry_seconds(self) -> int:
        """Return the challenge time-to-live in seconds."""
        return self.otp_expiry_minutes * 60


settings = Settings()
