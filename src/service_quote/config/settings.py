"""Configuration settings for the service quote engine."""

from datetime import date
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    # Quoting defaults
    quote_frequency: Literal["monthly", "annual"] = Field(
        default="monthly",
        validation_alias="QUOTE_FREQUENCY",
        description="Billing frequency used when a request does not name one",
    )
    quote_as_of: date | None = Field(
        default=None,
        validation_alias="QUOTE_AS_OF",
        description="Pins the current date used for period selection",
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
