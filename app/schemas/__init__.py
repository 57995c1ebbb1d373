"""Public schema exports."""

from .auth import (
    AuthUser,
    CallbackResponse,
    ErrorResponse,
    LogoutResponse,
    RefreshResponse,
    StatusResponse,
)

__all__ = [
    "AuthUser",
    "CallbackResponse",
    "ErrorResponse",
    "LogoutResponse",
    "RefreshResponse",
    "StatusResponse",
]
