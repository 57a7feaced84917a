"""Environment-driven configuration for the FastTrack backend and client.

Every knob the service relies on lives on ``AppSettings``. Values come from the
process environment (or a local ``.env``) and are read once, the first time
``get_settings`` runs. Import ``settings`` for the shared instance.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "FastTrack"
    DATA_DIR: Path = Path("/data/app_data")
    TZ: str = "UTC"

    # The container exposes port 80 through the reverse proxy; the API itself
    # listens on 3001.
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 60
    JWT_REFRESH_TTL_DAYS: int = 30
    # Service principal allowed to act for any user (X-API-Key header).
    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))
    # Comma separated in the environment, not JSON.
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=list)

    LOG_LEVEL: str = "INFO"

    # Manual entry form defaults: an evening start and a noon finish.
    DEFAULT_START_HOUR: int = 20
    DEFAULT_END_HOUR: int = 12

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'fasttrack.db'}"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")

    @field_validator("DEFAULT_START_HOUR", "DEFAULT_END_HOUR")
    @classmethod
    def check_hour(cls, value: int) -> int:
        if not 0 <= value <= 23:
            raise ValueError("default hours must be between 0 and 23")
        return value


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
