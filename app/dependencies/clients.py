"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Each factory is cached so the process holds exactly one instance, which is
then passed explicitly to whatever needs it.
"""

from datetime import timedelta
from functools import lru_cache

from app.clients import DynamoDBClient, LinkedInOAuthClient, SQLiteStore
from app.core.config import get_settings
from app.services import (
    AccessGate,
    OAuthTokenManager,
    OAuthTokenStore,
    SessionCookieCodec,
    TokenCipherService,
    UserRepository,
)
from app.services.token_store import RecordBackend


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_record_store() -> RecordBackend:
    """Provide the document store selected by ``TOKEN_STORE_BACKEND``."""
    storage = _settings().storage
    backend = storage.backend.lower()
    if backend == "sqlite":
        return SQLiteStore(storage.sqlite_db_path)
    if backend == "dynamodb":
        return DynamoDBClient(storage)
    raise ValueError(f"Unsupported TOKEN_STORE_BACKEND: {storage.backend!r}")


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.linkedin.client_secret
    return TokenCipherService(
        secret=secret,
        previous_secrets=settings.security.previous_secrets,
    )


@lru_cache()
def get_session_codec() -> SessionCookieCodec:
    """Provide the signer for session cookies."""
    settings = _settings()
    secret = settings.security.session_secret or settings.linkedin.client_secret
    return SessionCookieCodec(
        secret_key=secret,
        max_age_seconds=settings.security.session_max_age_seconds,
    )


@lru_cache()
def get_linkedin_oauth_client() -> LinkedInOAuthClient:
    """Create a singleton LinkedIn OAuth client."""
    settings = _settings()
    return LinkedInOAuthClient(settings.linkedin, settings.oauth)


@lru_cache()
def get_token_store() -> OAuthTokenStore:
    return OAuthTokenStore(get_record_store(), get_token_cipher_service())


@lru_cache()
def get_token_manager() -> OAuthTokenManager:
    """Provide the token lifecycle manager."""
    settings = _settings()
    return OAuthTokenManager(
        store=get_token_store(),
        oauth_client=get_linkedin_oauth_client(),
        refresh_threshold=timedelta(hours=settings.oauth.refresh_threshold_hours),
        sweep_concurrency=settings.oauth.sweep_concurrency,
    )


@lru_cache()
def get_user_repository() -> UserRepository:
    return UserRepository(get_record_store())


@lru_cache()
def get_access_gate() -> AccessGate:
    return AccessGate(get_token_manager())


__all__ = [
    "get_access_gate",
    "get_linkedin_oauth_client",
    "get_record_store",
    "get_session_codec",
    "get_token_cipher_service",
    "get_token_manager",
    "get_token_store",
    "get_user_repository",
]
