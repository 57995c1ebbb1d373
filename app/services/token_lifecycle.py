"""
Token lifecycle management: hand out valid access tokens, refreshing on demand.

The manager is the only writer of token records. Interactive reads refresh
only once the access token has actually expired; tokens that are merely near
expiry are left to ``sweep_expiring``, which a periodic job runs ahead of time.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from app.clients.linkedin_auth import LinkedInOAuthClient
from app.core.errors import (
    NoToken,
    OAuthError,
    ReauthorizationRequired,
    RefreshFailed,
    StoreUnavailable,
)
from app.models.oauth import OAuthTokenRecord, Provider, TokenPayload, TokenState, utcnow
from app.services.token_store import OAuthTokenStore

logger = logging.getLogger(__name__)


@dataclass
class SweepFailure:
    subject: str
    error_code: str
    error: str


@dataclass
class SweepResult:
    """Aggregate outcome of a refresh sweep."""

    succeeded: int = 0
    failed: int = 0
    errors: List[SweepFailure] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "errors": [
                {"subject": e.subject, "error": e.error_code, "message": e.error}
                for e in self.errors
            ],
        }


class OAuthTokenManager:
    """Obtain, persist, validate and refresh access/refresh token pairs."""

    def __init__(
        self,
        store: OAuthTokenStore,
        oauth_client: LinkedInOAuthClient,
        *,
        refresh_threshold: timedelta = timedelta(hours=24),
        sweep_concurrency: int = 4,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._provider: Provider = oauth_client.provider
        self._refresh_threshold = refresh_threshold
        self._sweep_concurrency = max(1, sweep_concurrency)
        self._clock = clock
        self._inflight: Dict[Tuple[str, Provider], asyncio.Task] = {}

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def refresh_threshold(self) -> timedelta:
        return self._refresh_threshold

    def store_tokens(
        self,
        subject: str,
        payload: TokenPayload,
        *,
        refresh_expires_at: Optional[datetime] = None,
    ) -> OAuthTokenRecord:
        """Persist ``payload`` for ``subject``, anchoring expiries to now."""
        return self._store.upsert(
            subject,
            self._provider,
            payload,
            issued_at=self._clock(),
            refresh_expires_at=refresh_expires_at,
        )

    def token_state(self, subject: str) -> Optional[TokenState]:
        """Classify the stored token without touching the provider."""
        record = self._store.get(subject, self._provider)
        if record is None:
            return None
        return record.state(self._refresh_threshold, self._clock())

    async def get_valid_access_token(self, subject: str) -> str:
        """Return a usable access token for ``subject``.

        Raises ``NoToken`` when nothing is stored, ``ReauthorizationRequired``
        when neither token can be used, and ``RefreshFailed`` when the
        provider refresh did not succeed (the stored record is left as is).
        """
        record = self._store.get(subject, self._provider, include_secrets=True)
        if record is None:
            raise NoToken(f"No OAuth token found for user {subject}.")

        now = self._clock()
        if not record.is_access_token_expired(now):
            return record.access_token  # type: ignore[return-value]

        if not record.has_refresh_token:
            raise ReauthorizationRequired(
                "Access token expired and no refresh token available."
            )
        if record.is_refresh_token_expired(now):
            raise ReauthorizationRequired(
                "Both access and refresh tokens are expired. Re-authentication required."
            )

        refreshed = await self._refresh_single_flight(record)
        return refreshed.access_token  # type: ignore[return-value]

    async def has_valid_token(self, subject: str) -> bool:
        try:
            await self.get_valid_access_token(subject)
        except OAuthError as exc:
            logger.debug(
                "No valid token for subject",
                extra={"subject": subject, "error_code": exc.error_code},
            )
            return False
        except Exception:  # pylint: disable=broad-except
            logger.exception("Token lookup failed", extra={"subject": subject})
            return False
        return True

    def revoke(self, subject: str) -> None:
        """Forget the tokens held for ``subject``. Safe to call repeatedly."""
        self._store.delete(subject, self._provider)
        logger.info("Revoked OAuth tokens", extra={"subject": subject})

    async def sweep_expiring(self, within: Optional[timedelta] = None) -> SweepResult:
        """Refresh every refreshable token expiring within ``within``.

        Never raises: each record succeeds or fails on its own and failures are
        reported in the returned ``SweepResult``.
        """
        within = self._refresh_threshold if within is None else within
        result = SweepResult()
        try:
            records = self._store.find_expiring_within(
                within, self._provider, now=self._clock()
            )
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Failed to load tokens for refresh sweep")
            result.failed += 1
            result.errors.append(
                SweepFailure("*", StoreUnavailable.error_code, str(exc))
            )
            return result

        semaphore = asyncio.Semaphore(self._sweep_concurrency)

        async def _sweep_one(record: OAuthTokenRecord) -> None:
            async with semaphore:
                try:
                    if record.is_refresh_token_expired(self._clock()):
                        raise ReauthorizationRequired("Refresh token expired.")
                    await self._refresh_single_flight(record)
                except OAuthError as exc:
                    logger.warning(
                        "Sweep refresh failed for %s: %s",
                        record.subject,
                        exc.error_code,
                    )
                    result.failed += 1
                    result.errors.append(
                        SweepFailure(record.subject, exc.error_code, exc.detail)
                    )
                except Exception as exc:  # pylint: disable=broad-except
                    logger.exception(
                        "Unexpected sweep failure", extra={"subject": record.subject}
                    )
                    result.failed += 1
                    result.errors.append(
                        SweepFailure(record.subject, "internal_error", str(exc))
                    )
                else:
                    result.succeeded += 1

        await asyncio.gather(*(_sweep_one(record) for record in records))
        logger.info(
            "Token refresh sweep finished: %d succeeded, %d failed",
            result.succeeded,
            result.failed,
        )
        return result

    async def _refresh_single_flight(self, record: OAuthTokenRecord) -> OAuthTokenRecord:
        key = (record.subject, self._provider)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(record))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def _refresh(self, record: OAuthTokenRecord) -> OAuthTokenRecord:
        try:
            payload = await self._oauth.refresh_token(record.refresh_token)
        except OAuthError as exc:
            logger.warning(
                "Refresh failed for %s: %s",
                record.subject,
                exc,
            )
            raise RefreshFailed(exc) from exc

        retained_refresh_expiry = None
        if not payload.refresh_token:
            payload = payload.model_copy(update={"refresh_token": record.refresh_token})
            retained_refresh_expiry = record.refresh_expires_at

        try:
            self.store_tokens(
                record.subject,
                payload,
                refresh_expires_at=retained_refresh_expiry,
            )
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception(
                "Failed to persist refreshed token", extra={"subject": record.subject}
            )
            raise RefreshFailed(StoreUnavailable(str(exc))) from exc
        logger.info("Refreshed access token", extra={"subject": record.subject})
        return record.model_copy(
            update={
                "access_token": payload.access_token,
                "refresh_token": payload.refresh_token,
            }
        )


__all__ = ["OAuthTokenManager", "SweepFailure", "SweepResult"]
