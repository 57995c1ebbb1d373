"""Service layer exports."""

from .access_gate import AccessGate, AuthContext
from .oauth_state import SessionCookieCodec, generate_state, validate_state
from .token_cipher import TokenCipherService
from .token_lifecycle import OAuthTokenManager, SweepResult
from .token_store import OAuthTokenStore
from .users import UserRepository

__all__ = [
    "AccessGate",
    "AuthContext",
    "OAuthTokenManager",
    "OAuthTokenStore",
    "SessionCookieCodec",
    "SweepResult",
    "TokenCipherService",
    "UserRepository",
    "generate_state",
    "validate_state",
]
