"""
Domain models for OAuth token persistence and lifecycle decisions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Provider(str, Enum):
    """Authorization servers the service can hold tokens for."""

    LINKEDIN = "linkedin"


class TokenState(str, Enum):
    """Where a stored token sits relative to "now"."""

    FRESH = "fresh"
    NEAR_EXPIRY = "near_expiry"
    ACCESS_EXPIRED_REFRESH_VALID = "access_expired_refresh_valid"
    BOTH_EXPIRED = "both_expired"


class TokenPayload(BaseModel):
    """Raw token endpoint response, expiries still relative to issue time."""

    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds.")
    refresh_token: Optional[str] = None
    refresh_token_expires_in: Optional[int] = None
    scope: Optional[str] = None
    token_type: str = "Bearer"


class OAuthTokenRecord(BaseModel):
    """One persisted token pair per (subject, provider).

    ``access_token`` and ``refresh_token`` are only populated when the record
    was read with secrets; the default projection leaves both as ``None`` and
    reports refresh capability through ``has_refresh_token``.
    """

    subject: str
    provider: Provider = Provider.LINKEDIN
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    has_refresh_token: bool = False
    token_type: str = "Bearer"
    access_expires_at: datetime
    refresh_expires_at: Optional[datetime] = None
    scope: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_access_token_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.access_expires_at

    def needs_refresh(self, threshold: timedelta, now: Optional[datetime] = None) -> bool:
        return self.access_expires_at <= (now or utcnow()) + threshold

    def is_refresh_token_expired(self, now: Optional[datetime] = None) -> bool:
        # A missing expiry means the provider did not bound the refresh token.
        if self.refresh_expires_at is None:
            return False
        return (now or utcnow()) >= self.refresh_expires_at

    def can_refresh(self, now: Optional[datetime] = None) -> bool:
        return self.has_refresh_token and not self.is_refresh_token_expired(now)

    def state(self, threshold: timedelta, now: Optional[datetime] = None) -> TokenState:
        now = now or utcnow()
        if not self.is_access_token_expired(now):
            if self.needs_refresh(threshold, now):
                return TokenState.NEAR_EXPIRY
            return TokenState.FRESH
        if self.can_refresh(now):
            return TokenState.ACCESS_EXPIRED_REFRESH_VALID
        return TokenState.BOTH_EXPIRED


__all__ = [
    "OAuthTokenRecord",
    "Provider",
    "TokenPayload",
    "TokenState",
    "utcnow",
]
