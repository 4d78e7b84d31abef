# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single immutable Settings class with all configuration values.
#
# Usage:
#   from app.config import load_settings
#   settings = load_settings()
#   app = create_app(settings)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Settings are built once at process entry and passed to every component
# that needs them. Nothing imports a settings global.
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    Fatal at startup: the server never binds a port after this is raised.
    """

    def __init__(self, message: str, missing: list[str] | None = None, invalid: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.missing = missing or []
        self.invalid = invalid or []


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Frozen after construction; components receive the instance explicitly.
    """

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    PORT: int = Field(
        ...,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CLIENT_URL: str = Field(
        ...,
        min_length=1,
        description="Origin of the frontend allowed to send credentialed requests"
    )

    NODE_ENV: Literal["development", "test", "production"] = Field(
        ...,
        description="Current environment"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable verbose logging"
    )

    FRONTEND_DIST_DIR: str = Field(
        default="frontend/dist",
        description="Pre-built frontend bundle served in production"
    )

    MAX_JSON_BODY_BYTES: int = Field(
        default=100 * 1024,
        ge=1,
        description="Largest JSON request body accepted (413 beyond this)"
    )

    # -------------------------------------------------------------------------
    # Database (Supabase)
    # -------------------------------------------------------------------------

    DB_URL: str = Field(
        ...,
        min_length=1,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    DB_SERVICE_KEY: str = Field(
        ...,
        min_length=1,
        description="Supabase service_role key (bypasses RLS)"
    )

    DB_CONNECT_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times to try connecting at startup"
    )

    DB_CONNECT_BACKOFF_SECONDS: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Base delay between connection attempts (doubles each retry)"
    )

    # -------------------------------------------------------------------------
    # Clerk (authentication)
    # -------------------------------------------------------------------------

    CLERK_PUBLISHABLE_KEY: str = Field(..., min_length=1)

    CLERK_SECRET_KEY: str = Field(..., min_length=1)

    CLERK_JWKS_URL: str = Field(
        default="https://api.clerk.com/v1/jwks",
        description="Where session token signing keys are published"
    )

    # -------------------------------------------------------------------------
    # Inngest (background jobs) + Redis (Celery broker)
    # -------------------------------------------------------------------------

    INNGEST_EVENT_KEY: str = Field(..., min_length=1)

    INNGEST_SIGNING_KEY: str = Field(..., min_length=1)

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Stream (chat vendor)
    # -------------------------------------------------------------------------

    STREAM_API_KEY: str = Field(..., min_length=1)

    STREAM_API_SECRET: str = Field(..., min_length=1)

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """Only the configured client origin may send credentialed requests."""
        return [self.CLIENT_URL.strip().rstrip("/")]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.NODE_ENV == "production"

    @property
    def frontend_dist_path(self) -> Path:
        return Path(self.FRONTEND_DIST_DIR).resolve()


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment, failing fast on any problem.

    Args:
        **overrides: Explicit values that take precedence over the environment

    Returns:
        Settings: Fully populated, immutable settings

    Raises:
        ConfigurationError: Lists every missing or invalid parameter
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing: list[str] = []
        invalid: list[str] = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"])
            if error["type"] == "missing":
                missing.append(name)
            else:
                invalid.append(name)

        parts = []
        if missing:
            parts.append(f"missing required parameters: {', '.join(missing)}")
        if invalid:
            parts.append(f"invalid parameters: {', '.join(invalid)}")
        raise ConfigurationError(
            "Configuration error - " + "; ".join(parts),
            missing=missing,
            invalid=invalid,
        ) from e


@lru_cache
def get_settings() -> Settings:
    """
    Get the cached Settings instance for the process entry point.

    Only entry points (server, worker) call this; everything else receives
    the settings it was built with.
    """
    return load_settings()
