"""Expose dependency helpers for FastAPI routers."""

from .auth import (
    get_session,
    load_session,
    require_linkedin_auth,
    resolve_subject,
    save_session,
)
from .clients import (
    get_access_gate,
    get_linkedin_oauth_client,
    get_record_store,
    get_session_codec,
    get_token_cipher_service,
    get_token_manager,
    get_token_store,
    get_user_repository,
)
from .config import (
    get_app_settings,
    get_security_settings,
)

__all__ = [
    "get_access_gate",
    "get_app_settings",
    "get_linkedin_oauth_client",
    "get_record_store",
    "get_security_settings",
    "get_session",
    "get_session_codec",
    "get_token_cipher_service",
    "get_token_manager",
    "get_token_store",
    "get_user_repository",
    "load_session",
    "require_linkedin_auth",
    "resolve_subject",
    "save_session",
]
