"""
Application configuration models and helpers.

Centralizes settings management so both the FastAPI service and the
client-side report store share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class ReportApiSettings(BaseSettings):
    """Location and timeouts of the upstream report API."""

    live_api_url: str = Field(
        "http://localhost:8080", validation_alias="LIVE_API_URL"
    )
    report_count_url: str = Field(
        "http://localhost:8080/valid-reports-count",
        validation_alias="REPORT_COUNT_URL",
    )
    timeout_seconds: float = Field(30.0, validation_alias="REPORT_API_TIMEOUT")
    retry_attempts: int = Field(
        1,
        validation_alias="REPORT_API_RETRY_ATTEMPTS",
        description="Attempts for the report counter proxy. Cached lookups never retry.",
    )

    @field_validator("live_api_url", "report_count_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class CacheSettings(BaseSettings):
    """Bounds for the in-memory report detail cache."""

    capacity: int = Field(1000, validation_alias="REPORT_CACHE_CAPACITY", gt=0)
    ttl_seconds: float = Field(3600.0, validation_alias="REPORT_CACHE_TTL", gt=0)
    eviction_fraction: float = Field(
        0.2, validation_alias="REPORT_CACHE_EVICTION_FRACTION"
    )

    @field_validator("eviction_fraction")
    @classmethod
    def _check_fraction(cls, value: float) -> float:
        if not 0 < value <= 1:
            raise ValueError("eviction_fraction must be within (0, 1].")
        return value


class SyncSettings(BaseSettings):
    """Defaults used by the client-side report store and counter poller."""

    default_count: int = Field(10, validation_alias="REPORTS_DEFAULT_COUNT", gt=0)
    language: str = Field("en", validation_alias="REPORTS_LANGUAGE")
    counter_poll_seconds: float = Field(
        30.0, validation_alias="REPORT_COUNTER_POLL_SECONDS", gt=0
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    report_api: ReportApiSettings = Field(default_factory=ReportApiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "CacheSettings",
    "ReportApiSettings",
    "SyncSettings",
    "get_settings",
]
