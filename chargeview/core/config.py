"""Configuration management for the chargeview reporting service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="chargeview")
    version: str = Field(default="0.1.0")
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str = Field(default="/openapi.json")

    database_url: str = Field(default="postgresql+psycopg://steve:steve@db:5432/stevedb")

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=True)
    otel_exporter_endpoint: str | None = Field(default=None)
    otel_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    display_timezone: str = Field(
        default="UTC",
        description="IANA zone used when rendering human readable timestamps.",
    )
    csv_export_batch_size: int = Field(default=500, gt=0)

    log_level: str = Field(default="INFO")
    log_config_path: Path | None = Field(default=None)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
