"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["*"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Metagate"
    environment: str = "development"

    provider_identifier: str = "tv.plex.agents.custom.metagate"
    provider_title: str = "Metagate (TMDB, Spotify, Google Books)"
    provider_version: str = "1.0.0"

    tmdb_api_key: Optional[str] = None
    tmdb_api_auth_header: Optional[str] = None
    tmdb_language: str = "en-US"
    home_region: str = "US"
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    google_books_api_key: Optional[str] = None

    upstream_timeout_seconds: Optional[float] = None
    upstream_max_attempts: int = 1
    token_refresh_margin_seconds: int = 300

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        if isinstance(value, list):
            cleaned = [origin.strip() for origin in value if isinstance(origin, str) and origin.strip()]
            return cleaned or DEFAULT_CORS_ORIGINS.copy()
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return DEFAULT_CORS_ORIGINS.copy()
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                cleaned = [str(origin).strip() for origin in parsed if str(origin).strip()]
                if cleaned:
                    return cleaned
            origins = [origin.strip() for origin in stripped.split(",") if origin.strip()]
            if origins:
                return origins
        return DEFAULT_CORS_ORIGINS.copy()

    @field_validator("upstream_max_attempts")
    @classmethod
    def _validate_attempts(cls, value: int) -> int:
        """Require at least one upstream attempt."""
        if value < 1:
            raise ValueError("UPSTREAM_MAX_ATTEMPTS must be at least 1")
        return value

    @field_validator("home_region")
    @classmethod
    def _upper_region(cls, value: str) -> str:
        return value.strip().upper()

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
