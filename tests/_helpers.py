"""Fakes and seeding helpers shared by the OAuth tests."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from app.core.errors import TransportError
from app.models.oauth import Provider, TokenPayload
from app.models.user import ProviderIdentity
from app.services.token_store import OAuthTokenStore


class FakeOAuthClient:
    """Stands in for ``LinkedInOAuthClient`` without any network access."""

    provider = Provider.LINKEDIN

    def __init__(
        self,
        *,
        access_token: str = "refreshed-access",
        expires_in: int = 5184000,
        refresh_token: str | None = "rotated-refresh",
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.access_token = access_token
        self.expires_in = expires_in
        self.refresh_token_value = refresh_token
        self.error = error
        self.delay = delay
        self.refresh_calls: list[str] = []
        self.codes: list[str] = []
        self.states: list[str] = []
        self.identity_calls: list[str] = []
        self.identity = ProviderIdentity(
            subject="li-sub-1",
            name="Ada Lovelace",
            profile_url="https://www.linkedin.com/in/ada",
        )
        self.failing_refresh_tokens: set[str] = set()

    def build_authorization_url(self, state: str) -> str:
        self.states.append(state)
        return f"https://www.linkedin.com/oauth/v2/authorization?state={state}"

    async def exchange_authorization_code(self, code: str) -> TokenPayload:
        self.codes.append(code)
        return TokenPayload(
            access_token="initial-access",
            expires_in=5184000,
            refresh_token="initial-refresh",
            refresh_token_expires_in=31536000,
            scope="openid profile email",
        )

    async def refresh_token(self, refresh_token: str) -> TokenPayload:
        self.refresh_calls.append(refresh_token)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if refresh_token in self.failing_refresh_tokens:
            raise TransportError("connection reset")
        return TokenPayload(
            access_token=f"{self.access_token}-{len(self.refresh_calls)}",
            expires_in=self.expires_in,
            refresh_token=self.refresh_token_value,
        )

    async def fetch_identity(self, access_token: str) -> ProviderIdentity:
        self.identity_calls.append(access_token)
        return self.identity


def seed_token(
    store: OAuthTokenStore,
    subject: str,
    *,
    access_expires_in: timedelta,
    refresh_token: str | None = "stored-refresh",
    refresh_expires_in: timedelta | None = None,
    access_token: str = "stored-access",
) -> None:
    """Store a token whose expiries sit at ``now + delta`` (negative = past)."""
    issued_at = datetime.now(timezone.utc) - timedelta(days=400)
    offset = timedelta(days=400)
    refresh_lifetime = None
    if refresh_expires_in is not None:
        refresh_lifetime = int((refresh_expires_in + offset).total_seconds())
    store.upsert(
        subject,
        Provider.LINKEDIN,
        TokenPayload(
            access_token=access_token,
            expires_in=int((access_expires_in + offset).total_seconds()),
            refresh_token=refresh_token,
            refresh_token_expires_in=refresh_lifetime,
        ),
        issued_at=issued_at,
    )
