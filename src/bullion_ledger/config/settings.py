"""Configuration settings for Bullion Ledger."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Hosted backend
    ledger_api_url: str = Field(
        default="http://localhost:54321", validation_alias="LEDGER_API_URL"
    )
    ledger_api_key: SecretStr = Field(..., validation_alias="LEDGER_API_KEY")
    ledger_email: str = Field(..., validation_alias="LEDGER_EMAIL")
    ledger_password: SecretStr = Field(..., validation_alias="LEDGER_PASSWORD")
    ledger_timeout: float = Field(default=30.0, validation_alias="LEDGER_TIMEOUT")
    ledger_max_retries: int = Field(default=3, validation_alias="LEDGER_MAX_RETRIES")

    # Local cache
    cache_ttl_seconds: float = Field(default=300.0, validation_alias="CACHE_TTL_SECONDS")
    trades_cache_ttl_seconds: float = Field(
        default=120.0, validation_alias="TRADES_CACHE_TTL_SECONDS"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
