"""
Failure taxonomy for the authorization flow and token lifecycle.

Every error carries a stable ``error_code`` and a generic ``public_message``
that are safe to show to end users. Provider detail stays on the exception
(``str(exc)`` and the typed attributes) for operators.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class OAuthError(Exception):
    """Base class for every failure raised by the OAuth core."""

    error_code = "oauth_error"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    public_message = "Authentication failed."

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message


class StateMismatch(OAuthError):
    error_code = "invalid_state"
    status_code = HTTPStatus.BAD_REQUEST
    public_message = "State parameter mismatch."


class MissingCode(OAuthError):
    error_code = "missing_code"
    status_code = HTTPStatus.BAD_REQUEST
    public_message = "Authorization code not provided."


class MissingState(OAuthError):
    error_code = "missing_state"
    status_code = HTTPStatus.BAD_REQUEST
    public_message = "State parameter not provided."


class UserDenied(OAuthError):
    """The provider redirected back with an ``error`` instead of a code."""

    error_code = "user_denied"
    status_code = HTTPStatus.BAD_REQUEST
    public_message = "OAuth authorization failed."

    #: LinkedIn's error code for a member pressing "Cancel" on the consent screen.
    CANCELLED_CODE = "user_cancelled_authorize"

    def __init__(self, provider_error: str, description: Optional[str] = None) -> None:
        super().__init__(f"{provider_error}: {description or 'no description'}")
        self.provider_error = provider_error
        self.provider_description = description

    @property
    def user_cancelled(self) -> bool:
        return self.provider_error == self.CANCELLED_CODE


class TokenExchangeFailed(OAuthError):
    error_code = "token_exchange_failed"
    status_code = HTTPStatus.BAD_GATEWAY
    public_message = "The authorization server rejected the token request."

    def __init__(self, provider_code: str, provider_message: Optional[str] = None) -> None:
        super().__init__(f"{provider_code}: {provider_message or 'no description'}")
        self.provider_code = provider_code
        self.provider_message = provider_message


class TransportError(OAuthError):
    """Timeout, DNS or connection failure talking to the provider. Retryable."""

    error_code = "provider_unavailable"
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    public_message = "The authorization server could not be reached."


class IdentityFetchFailed(OAuthError):
    error_code = "identity_fetch_failed"
    status_code = HTTPStatus.BAD_GATEWAY
    public_message = "Failed to load the member profile."

    def __init__(self, provider_status: int, provider_message: Optional[str] = None) -> None:
        super().__init__(f"HTTP {provider_status}: {provider_message or 'no description'}")
        self.provider_status = provider_status
        self.provider_message = provider_message


class NoToken(OAuthError):
    error_code = "no_token"
    status_code = HTTPStatus.UNAUTHORIZED
    public_message = "No OAuth token found for user."


class RefreshFailed(OAuthError):
    error_code = "refresh_failed"
    status_code = HTTPStatus.BAD_GATEWAY
    public_message = "Failed to refresh the access token."

    def __init__(self, cause: OAuthError) -> None:
        super().__init__(f"{cause.error_code}: {cause.detail}")
        self.cause = cause


class StoreUnavailable(OAuthError):
    """The token store could not be read or written."""

    error_code = "store_unavailable"
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    public_message = "Token storage is temporarily unavailable."


class ReauthorizationRequired(OAuthError):
    error_code = "reauthorization_required"
    status_code = HTTPStatus.UNAUTHORIZED
    public_message = "Authentication expired. Please log in again."


class Unauthorized(OAuthError):
    error_code = "unauthorized"
    status_code = HTTPStatus.UNAUTHORIZED
    public_message = "Authentication required. Please log in."


__all__ = [
    "IdentityFetchFailed",
    "MissingCode",
    "MissingState",
    "NoToken",
    "OAuthError",
    "ReauthorizationRequired",
    "RefreshFailed",
    "StateMismatch",
    "StoreUnavailable",
    "TokenExchangeFailed",
    "TransportError",
    "Unauthorized",
    "UserDenied",
]
