"""
Application configuration models and helpers.

Centralizes settings management so the sync pipeline, the HTTP API, and the
command-line front end share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AnyHttpUrl, Field, HttpUrl
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


class EpicSettings(BaseSettings):
    """Client identity and service hosts for the Epic Games account APIs."""

    model_config = SettingsConfigDict(populate_by_name=True)

    client_id: str = Field(..., validation_alias="EPIC_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="EPIC_CLIENT_SECRET")
    oauth_host: str = Field(
        "account-public-service-prod03.ol.epicgames.com",
        validation_alias="EPIC_OAUTH_HOST",
    )
    launcher_host: str = Field(
        "launcher-public-service-prod06.ol.epicgames.com",
        validation_alias="EPIC_LAUNCHER_HOST",
    )
    library_host: str = Field(
        "library-service.live.use1a.on.epicgames.com",
        validation_alias="EPIC_LIBRARY_HOST",
    )
    catalog_host: str = Field(
        "catalog-public-service-prod06.ol.epicgames.com",
        validation_alias="EPIC_CATALOG_HOST",
    )
    authorize_url: AnyHttpUrl = Field(
        "https://www.epicgames.com/id/api/redirect",
        validation_alias="EPIC_AUTHORIZE_URL",
        description="Login page that redirects back with an authorization code.",
    )
    platform: str = Field("Windows", validation_alias="EPIC_PLATFORM")
    country: str = Field("US", validation_alias="EPIC_COUNTRY")
    locale: str = Field("en", validation_alias="EPIC_LOCALE")


class HttpSettings(BaseSettings):
    """Transport timeouts handed to httpx."""

    model_config = SettingsConfigDict(populate_by_name=True)

    connect_timeout: float = Field(15.0, validation_alias="HTTP_CONNECT_TIMEOUT")
    read_timeout: float = Field(30.0, validation_alias="HTTP_READ_TIMEOUT")


class SyncSettings(BaseSettings):
    """Freshness and hardening knobs for the library sync pipeline."""

    model_config = SettingsConfigDict(populate_by_name=True)

    cache_ttl_hours: float = Field(6.0, validation_alias="LIBRARY_CACHE_TTL_HOURS")
    max_library_pages: int = Field(
        500,
        validation_alias="LIBRARY_MAX_PAGES",
        description="Upper bound on cursor pages followed in one sync.",
    )
    metadata_concurrency: int = Field(
        4,
        ge=1,
        validation_alias="LIBRARY_METADATA_CONCURRENCY",
        description="Catalog lookups allowed in flight at once.",
    )
    token_expiry_skew_minutes: float = Field(
        10.0, validation_alias="TOKEN_EXPIRY_SKEW_MINUTES"
    )


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    db_path: str = Field("data/epic_library.db", validation_alias="EPIC_LIBRARY_DB_PATH")
    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting the stored session."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the library sync application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting users back to the front-end.",
    )
    epic: EpicSettings = Field(default_factory=EpicSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "EpicSettings",
    "HttpSettings",
    "StorageSettings",
    "SyncSettings",
    "get_settings",
]
