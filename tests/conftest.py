"""Pytest configuration shared across the suite."""

from __future__ import annotations

import _bootstrap  # noqa: F401

import pytest

from app.clients.sqlite_store import SQLiteStore
from app.core.config import LinkedInSettings, OAuthSettings
from app.services.token_cipher import TokenCipherService
from app.services.token_store import OAuthTokenStore


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def record_store(tmp_path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "oauth.db"))


@pytest.fixture
def cipher() -> TokenCipherService:
    return TokenCipherService(secret="secret-key")


@pytest.fixture
def token_store(record_store, cipher) -> OAuthTokenStore:
    return OAuthTokenStore(record_store, cipher)


@pytest.fixture
def linkedin_settings() -> LinkedInSettings:
    return LinkedInSettings(
        LINKEDIN_CLIENT_ID="client-123",
        LINKEDIN_CLIENT_SECRET="shh",
        LINKEDIN_REDIRECT_URI="https://app.example.com/auth/linkedin/callback",
        LINKEDIN_SCOPES="openid,profile,email",
    )


@pytest.fixture
def oauth_settings() -> OAuthSettings:
    return OAuthSettings()
