"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Record store (unset -> in-memory)
    database_url: str | None = None

    # Session store (unset -> in-memory)
    redis_url: str | None = None

    # Sessions
    session_cookie_name: str = "docshare_session"
    session_cookie_secure: bool = False
    session_ttl_seconds: int = 24 * 3600

    # PIN elevation lifetime (unset -> lasts as long as the session)
    pin_elevation_ttl_seconds: int | None = None

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    # Rate limiting (attempts per minute)
    pin_attempts_per_min: int = 10
    login_attempts_per_min: int = 20

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
