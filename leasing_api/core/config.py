"""Application configuration for the leasing assistant API."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    database_url: str = Field(default="postgresql+asyncpg://localhost/leasing_assistant")
    database_ssl_required: bool = Field(default=False)
    database_pool_size: int = Field(default=20, ge=1)
    seed_on_startup: bool = Field(default=False)

    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.0-flash")
    gemini_model_fallbacks: list[str] = Field(default_factory=lambda: [
        "gemini-2.0-flash-lite",
        "gemini-1.5-flash-latest",
    ])
    oracle_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    oracle_max_output_tokens: int = Field(default=500, ge=1)
    oracle_timeout_seconds: float = Field(default=20.0, gt=0)
    oracle_max_rounds: int = Field(default=3, ge=1)

    storage_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("gemini_model_fallbacks", "cors_allow_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        """Allow comma-separated env values for list settings."""

        if isinstance(value, str):
            parts = [item.strip() for item in value.split(",") if item.strip()]
            return parts
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
