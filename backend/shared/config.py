"""
Centralized configuration for the EcoLearn backend.

All settings are loaded from environment variables with sensible defaults.
Token settings keep the names the deployment already uses
(JWT_SECRET, JWT_ACCESS_EXPIRE, JWT_REFRESH_EXPIRE).
"""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

MIN_JWT_SECRET_LENGTH = 32

_DURATION_PATTERN = re.compile(r"^(\d+)([dhm])$")
_DURATION_UNITS = {"d": "days", "h": "hours", "m": "minutes"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "EcoLearn API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # direct Postgres URI, used only by run_migrations.py

    # Tokens
    jwt_secret: str = ""
    jwt_issuer: str = "ecolearn-loja"
    jwt_algorithm: str = "HS256"
    jwt_access_expire: str = "15m"
    jwt_refresh_expire: str = "7d"
    refresh_token_rotation: bool = False

    # Passwords
    bcrypt_rounds: int = 12

    # Background jobs
    token_cleanup_interval_minutes: int = 60

    # Logging
    log_level: str = "INFO"
    log_file_path: Optional[str] = None


def parse_duration(value: Optional[str], default: timedelta) -> timedelta:
    """
    Parse a duration such as '7d', '24h' or '15m'.

    Returns ``default`` when the value is empty or does not match.
    """
    if not value:
        return default
    match = _DURATION_PATTERN.match(value.strip())
    if not match:
        return default
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def validate_security_settings(settings: Settings) -> None:
    """
    Refuse to run with a missing or weak signing secret.

    Raises:
        ConfigurationError: If JWT_SECRET is unset or too short
    """
    if not settings.jwt_secret:
        raise ConfigurationError(
            "JWT_SECRET is not configured",
            code="JWT_SECRET_MISSING",
        )
    if len(settings.jwt_secret) < MIN_JWT_SECRET_LENGTH:
        raise ConfigurationError(
            f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters",
            code="JWT_SECRET_TOO_SHORT",
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
