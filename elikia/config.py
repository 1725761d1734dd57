"""
Application configuration.

Loads settings from environment variables (and an optional .env file).
Settings are validated once at startup; an invalid configuration aborts
the process with ConfigurationError instead of failing per request.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

MIN_SECRET_LENGTH = 32
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class ConfigurationError(Exception):
    """Raised at startup when the configuration cannot be used. Never caught per request."""
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: str = "http://localhost:4200"

    # ==========================================================================
    # Tokens
    # ==========================================================================

    # No default: a missing secret must stop the process
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # ==========================================================================
    # Login / lockout
    # ==========================================================================

    lockout_threshold: int = 3
    lockout_duration_minutes: int = 30
    login_commit_attempts: int = 3
    password_hash_iterations: int = 100_000

    # ==========================================================================
    # Membership
    # ==========================================================================

    default_member_role: str = "BENEVOLE"

    # First administrator, created at startup when the store has none for this email
    bootstrap_admin_email: str = ""
    bootstrap_admin_password: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Validation
    # ==========================================================================

    @field_validator("jwt_secret_key")
    @classmethod
    def _secret_long_enough(cls, value: str) -> str:
        if len(value) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET_KEY must be set and at least {MIN_SECRET_LENGTH} characters long"
            )
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def _hmac_algorithm(cls, value: str) -> str:
        if value not in HMAC_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}")
        return value

    @field_validator(
        "jwt_access_token_expire_minutes",
        "lockout_threshold",
        "lockout_duration_minutes",
        "login_commit_attempts",
        "password_hash_iterations",
    )
    @classmethod
    def _strictly_positive(cls, value: int, info) -> int:
        if value <= 0:
            raise ValueError(f"{info.field_name.upper()} must be strictly positive")
        return value

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.jwt_access_token_expire_minutes)

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(minutes=self.lockout_duration_minutes)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def load_settings(**overrides: Any) -> Settings:
    """
    Build and validate settings.

    Raises:
        ConfigurationError: the environment does not describe a usable configuration
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
