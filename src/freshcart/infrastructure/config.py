"""
Application configuration with Pydantic Settings.
Values come from ``FRESHCART_*`` environment variables or a ``.env`` file.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):

    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///data/freshcart.db", description="SQLAlchemy database URL"
    )
    db_echo: bool = Field(default=False, description="Echo SQL statements")
    sqlite_busy_timeout_seconds: float = Field(
        default=5.0, gt=0, description="How long SQLite waits on a locked database"
    )

    # Payment provider
    payment_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for every payment provider call"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="FRESHCART_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    def is_production(self) -> bool:
        return self.environment in (Environment.PRODUCTION, Environment.STAGING)


@lru_cache
def get_settings() -> Settings:
    return Settings()
