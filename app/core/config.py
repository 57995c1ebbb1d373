"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the refresh sweep and the
maintenance scripts share a consistent configuration surface.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file into the environment."""
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


def _split_list(value: str) -> tuple[str, ...]:
    """Split a comma or whitespace separated list, keeping first-seen order."""
    items: list[str] = []
    for item in re.split(r"[,\s]+", value or ""):
        if item and item not in items:
            items.append(item)
    return tuple(items)


_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class LinkedInSettings(BaseSettings):
    """Client registration and endpoints of the LinkedIn authorization server."""

    model_config = _SETTINGS_CONFIG

    client_id: str = Field(..., validation_alias="LINKEDIN_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="LINKEDIN_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="LINKEDIN_REDIRECT_URI")
    authorization_url: str = Field(
        "https://www.linkedin.com/oauth/v2/authorization",
        validation_alias="LINKEDIN_AUTHORIZATION_URL",
    )
    token_url: str = Field(
        "https://www.linkedin.com/oauth/v2/accessToken",
        validation_alias="LINKEDIN_TOKEN_URL",
    )
    userinfo_url: str = Field(
        "https://api.linkedin.com/v2/userinfo",
        validation_alias="LINKEDIN_USERINFO_URL",
    )
    api_version: str = Field("202401", validation_alias="LINKEDIN_API_VERSION")
    scope: str = Field(
        "openid profile email",
        validation_alias="LINKEDIN_SCOPES",
        description="Comma or space separated scopes requested at consent time.",
    )

    @property
    def scopes(self) -> tuple[str, ...]:
        return _split_list(self.scope)


class OAuthSettings(BaseSettings):
    """OAuth flow and token lifecycle tuning."""

    model_config = _SETTINGS_CONFIG

    state_ttl_seconds: int = Field(600, validation_alias="OAUTH_STATE_TTL")
    refresh_threshold_hours: float = Field(
        24,
        validation_alias="OAUTH_REFRESH_THRESHOLD_HOURS",
        description="Tokens expiring within this window count as near expiry.",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="OAUTH_HTTP_TIMEOUT")
    sweep_concurrency: int = Field(
        4,
        validation_alias="OAUTH_SWEEP_CONCURRENCY",
        description="Maximum number of refreshes a sweep runs at once.",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = _SETTINGS_CONFIG

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )
    token_encryption_previous_secrets: str = Field(
        "",
        validation_alias="TOKEN_ENCRYPTION_PREVIOUS_SECRETS",
        description="Retired secrets, still accepted when decrypting.",
    )
    session_secret: Optional[str] = Field(None, validation_alias="SESSION_SECRET")
    session_cookie_name: str = Field("li_session", validation_alias="SESSION_COOKIE_NAME")
    session_max_age_seconds: int = Field(
        7 * 24 * 3600, validation_alias="SESSION_MAX_AGE"
    )

    @property
    def previous_secrets(self) -> tuple[str, ...]:
        return tuple(
            item.strip()
            for item in self.token_encryption_previous_secrets.split(",")
            if item.strip()
        )


class StorageSettings(BaseSettings):
    """Selects and configures the document store holding token records."""

    model_config = _SETTINGS_CONFIG

    backend: str = Field("sqlite", validation_alias="TOKEN_STORE_BACKEND")
    sqlite_db_path: str = Field(
        "data/linkedin_oauth.db", validation_alias="SQLITE_DB_PATH"
    )
    dynamodb_table_name: Optional[str] = Field(
        None, validation_alias="DYNAMODB_TABLE_NAME"
    )
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _SETTINGS_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    linkedin: LinkedInSettings = Field(default_factory=LinkedInSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in {"development", "dev", "local", "test"}


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "LinkedInSettings",
    "OAuthSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_settings",
]
