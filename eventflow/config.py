"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "staging" | "prod"
ENV = os.getenv("EVENTFLOW_ENV", "dev").lower()


class Settings(BaseSettings):
    """Environment configuration for the event approval backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///eventflow.db"
    SECRET_KEY: str = "change-me"
    LOG_LEVEL: str = "INFO"
    ALLOW_DB_CREATE_ALL: bool = False
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = False
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # --- Approval workflow -------------------------------------------------
    NOTIFICATIONS_ENABLED: bool = True
    # Lost compare-and-swap races are retried this many times before surfacing.
    TRANSITION_MAX_RETRIES: int = 1

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        """Accept lowercase level names from the environment."""

        return value.strip().upper() or "INFO"

    @field_validator("TRANSITION_MAX_RETRIES")
    @classmethod
    def _non_negative_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("TRANSITION_MAX_RETRIES must be >= 0")
        return value


class AppInfo(BaseModel):
    name: str = "eventflow-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
