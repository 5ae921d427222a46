"""
Application settings module.

Manages all configuration via environment variables using pydantic-settings.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class CORSSettings(BaseSettings):
    """CORS filter settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CORS_", extra="ignore")

    expose_headers: bool = True     # CORS_EXPOSE_HEADERS
    cookies_allowed: bool = False   # CORS_COOKIES_ALLOWED

    # Validate like the legacy filter: own method, singular header, substring match
    legacy_matching: bool = False


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "CORS Filter API"
    log_level: str = "INFO"

    cors: CORSSettings = CORSSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
