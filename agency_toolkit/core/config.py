"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether tenant API key authentication is required",
    )
    default_agency_id: str | None = Field(
        None,
        description="Agency used for requests when API key auth is disabled",
    )
    seed_agencies: str | None = Field(
        None,
        description=(
            "Comma-separated agencies to seed the in-memory store with, "
            "as id:name:api_key:token:plan entries"
        ),
    )
    toolkit_customer_limit: int = Field(
        25,
        description="Maximum customers for agencies on the toolkit plan",
        ge=1,
    )
    max_photos_per_upload: int = Field(
        5,
        description="Maximum number of photos accepted per upload session",
        ge=1,
    )
    max_photo_size_mb: int = Field(
        5,
        description="Maximum size of a single uploaded photo in megabytes",
        ge=1,
    )
    notifications_default_limit: int = Field(
        20,
        description="Default page size for the notifications list",
        ge=1,
    )
    notifications_max_limit: int = Field(
        100,
        description="Upper bound for the notifications list limit parameter",
        ge=1,
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated origins allowed to call embed endpoints",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RateGateSettings(BaseSettings):
    """Cooldown gate configuration for embed actions."""

    enabled: bool = Field(
        True,
        description="Enable the per-location upload cooldown",
    )
    upload_window_seconds: int = Field(
        60,
        description="Cooldown between upload sessions for the same location",
        ge=1,
    )
    max_entries: int = Field(
        10_000,
        description="Entry count above which stale entries are swept",
        ge=1,
    )
    retention_seconds: int = Field(
        120,
        description="Age after which an entry is removed by the sweep",
        ge=1,
    )
    include_headers: bool = Field(
        True,
        description="Include a Retry-After header when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_GATE_",
        case_sensitive=False,
    )


class AutosaveSettings(BaseSettings):
    """Defaults for debounced editing sessions."""

    debounce_seconds: float = Field(
        0.8,
        description="Quiet period before pending edits are persisted",
        gt=0,
    )
    enabled: bool = Field(
        True,
        description="Whether edit sessions autosave by default",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTOSAVE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    rate_gate: RateGateSettings = Field(default_factory=RateGateSettings)
    autosave: AutosaveSettings = Field(default_factory=AutosaveSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
