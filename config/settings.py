"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/marathon.db")
    STORAGE_KEY: str = "app-storage"

    WARNING_LIMIT: int = Field(default=3, ge=1)
    APTITUDE_DEFAULT_COUNT: int = Field(default=10, ge=1)

    CATALOG_PATH: str = "config/catalog.yaml"
    APP_CONFIG_PATH: str = "app_config.json"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
