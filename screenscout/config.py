"""Centralized application configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults.

Usage:
    from screenscout.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.TMDB_BASE_URL)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in .env.example that must never reach TMDB
_PLACEHOLDER_KEYS = {"your-tmdb-api-key", "changeme", "xxx"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    Required:
        MONGO_URI: The app refuses to start without a storage connection string.
        TMDB_API_KEY: Not checked at startup; catalog endpoints fail with a
            configuration error on first use when it is missing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Flask ──────────────────────────────────────────────────────────
    FLASK_ENV: str = Field(default="development", description="Flask environment (development/production)")
    FLASK_DEBUG: bool = Field(default=True, description="Enable Flask debug mode")
    SECRET_KEY: str = Field(default="change-me-in-production", description="Signs bearer tokens")
    CORS_ORIGINS: str = Field(default="*", description="Comma-separated allowed origins for /api/*")

    # ── TMDB ──────────────────────────────────────────────────────────
    TMDB_API_KEY: str = Field(default="", description="TMDB v3 API key")
    TMDB_BASE_URL: str = Field(default="https://api.themoviedb.org/3", description="TMDB API base URL")
    TMDB_IMAGE_BASE_URL: str = Field(
        default="https://image.tmdb.org/t/p/w500",
        description="Base URL for posters and profile images",
    )
    TMDB_BACKDROP_BASE_URL: str = Field(
        default="https://image.tmdb.org/t/p/w1280",
        description="Base URL for backdrop images",
    )
    TMDB_LANGUAGE: str = Field(default="en-US", description="Language sent with every TMDB request")

    # ── HTTP Client ───────────────────────────────────────────────────
    HTTP_TIMEOUT: int = Field(default=10, ge=1, le=120, description="TMDB request timeout (seconds)")
    DETAIL_FETCH_WORKERS: int = Field(default=8, ge=3, le=64, description="Thread pool size for detail fan-out")

    # ── Cache ─────────────────────────────────────────────────────────
    CACHE_TTL_SECONDS: int = Field(default=300, ge=0, description="Catalog listing cache TTL (seconds)")

    # ── MongoDB ───────────────────────────────────────────────────────
    MONGO_URI: str = Field(default="", description="MongoDB connection string (required)")
    MONGO_DB_NAME: str = Field(default="screenscout", description="Database name when the URI has none")

    # ── Auth ──────────────────────────────────────────────────────────
    TOKEN_MAX_AGE_SECONDS: int = Field(default=7 * 24 * 3600, ge=60, description="Bearer token lifetime")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' for prod, 'console' for dev)")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("TMDB_API_KEY", "MONGO_URI")
    @classmethod
    def strip_secret(cls, v: str) -> str:
        """Treat blank values and shipped placeholders as unset."""
        v = v.strip()
        if v.lower() in _PLACEHOLDER_KEYS:
            return ""
        return v

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Refuse the default secret key in production."""
        env = info.data.get("FLASK_ENV", "development")
        if env == "production" and v == "change-me-in-production":
            raise ValueError(
                "SECRET_KEY must be changed from the default in production. "
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("TMDB_BASE_URL", "TMDB_IMAGE_BASE_URL", "TMDB_BACKDROP_BASE_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure base URLs don't have trailing slashes."""
        return v.rstrip("/")

    @property
    def cors_origins(self) -> list[str] | str:
        if self.CORS_ORIGINS.strip() == "*":
            return "*"
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    """
    return Settings()
