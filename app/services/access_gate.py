"""
Request gating on token validity.

The gate turns a caller-supplied subject into a usable access token, or
rejects with ``Unauthorized``. Callers never learn why a subject was refused;
the underlying error code is logged instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import OAuthError, Unauthorized
from app.services.token_lifecycle import OAuthTokenManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    subject: str
    access_token: str


class AccessGate:
    def __init__(self, token_manager: OAuthTokenManager) -> None:
        self._tokens = token_manager

    async def require(self, subject: Optional[str]) -> AuthContext:
        """Resolve ``subject`` to a valid token or raise ``Unauthorized``."""
        if not subject:
            raise Unauthorized("No subject supplied with the request.")
        try:
            access_token = await self._tokens.get_valid_access_token(subject)
        except OAuthError as exc:
            logger.warning(
                "Rejected request for %s: %s (%s)",
                subject,
                exc.error_code,
                exc.detail,
            )
            raise Unauthorized() from exc
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Token resolution failed for %s", subject)
            raise Unauthorized() from exc
        return AuthContext(subject=subject, access_token=access_token)

    async def optional(self, subject: Optional[str]) -> Optional[AuthContext]:
        """Like ``require`` but returns ``None`` instead of rejecting."""
        if not subject:
            return None
        try:
            return await self.require(subject)
        except Unauthorized:
            return None


__all__ = ["AccessGate", "AuthContext"]
