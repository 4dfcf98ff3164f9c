"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./recent_usernames.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Recent Usernames Service"
    version: str = "1.0.0"

    # Autocomplete
    recent_usernames_default_limit: int = 3     # entries returned by a plain lookup
    recent_usernames_suggestion_limit: int = 4  # entries shown while typing


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
