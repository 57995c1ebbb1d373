"""
Persistence of OAuth token records on top of a pk/sk document store.

Records live at ``pk=user#<subject>``, ``sk=oauth#<provider>``, so the
document key itself enforces one record per (subject, provider). Secrets are
written encrypted and only decrypted when a caller asks for them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from app.clients.dynamodb import DynamoDBClient
from app.clients.sqlite_store import SQLiteStore
from app.models.oauth import OAuthTokenRecord, Provider, TokenPayload, utcnow
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

RecordBackend = Union[SQLiteStore, DynamoDBClient]

_SORT_KEY_PREFIX = "oauth#"


def _partition_key(subject: str) -> str:
    return f"user#{subject}"


def _sort_key(provider: Provider) -> str:
    return f"{_SORT_KEY_PREFIX}{provider.value}"


def _to_iso(value: datetime) -> str:
    return value.isoformat()


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


class OAuthTokenStore:
    """get / upsert / delete / find-expiring over token documents."""

    def __init__(self, backend: RecordBackend, token_cipher: TokenCipherService) -> None:
        self._backend = backend
        self._cipher = token_cipher

    def get(
        self,
        subject: str,
        provider: Provider = Provider.LINKEDIN,
        *,
        include_secrets: bool = False,
    ) -> Optional[OAuthTokenRecord]:
        """Return the record for (subject, provider), or ``None``.

        The default projection omits both secrets; pass ``include_secrets``
        to have them decrypted into the returned record.
        """
        item = self._backend.get_item(
            partition_key=_partition_key(subject),
            sort_key=_sort_key(provider),
        )
        if not item:
            return None
        return self._to_record(item, include_secrets=include_secrets)

    def upsert(
        self,
        subject: str,
        provider: Provider,
        payload: TokenPayload,
        *,
        issued_at: Optional[datetime] = None,
        refresh_expires_at: Optional[datetime] = None,
    ) -> OAuthTokenRecord:
        """Create or fully replace the record, fixing expiries against ``issued_at``.

        ``refresh_expires_at`` is an absolute fallback used when the payload
        carries a refresh token without a relative lifetime.
        """
        issued_at = issued_at or utcnow()
        access_expires_at = issued_at + timedelta(seconds=payload.expires_in)
        if not payload.refresh_token:
            refresh_expires_at = None
        elif payload.refresh_token_expires_in is not None:
            refresh_expires_at = issued_at + timedelta(
                seconds=payload.refresh_token_expires_in
            )

        pk, sk = _partition_key(subject), _sort_key(provider)
        existing = self._backend.get_item(partition_key=pk, sort_key=sk)
        created_at = (existing or {}).get("created_at") or _to_iso(issued_at)

        item: Dict[str, Any] = {
            "pk": pk,
            "sk": sk,
            "subject": subject,
            "provider": provider.value,
            "access_token_encrypted": self._cipher.encrypt(payload.access_token),
            "refresh_token_encrypted": (
                self._cipher.encrypt(payload.refresh_token)
                if payload.refresh_token
                else None
            ),
            "token_type": payload.token_type or "Bearer",
            "access_expires_at": _to_iso(access_expires_at),
            "refresh_expires_at": (
                _to_iso(refresh_expires_at) if refresh_expires_at else None
            ),
            "scope": payload.scope,
            "created_at": created_at,
            "updated_at": _to_iso(issued_at),
        }
        self._backend.put_item(item)
        logger.debug(
            "Stored OAuth token",
            extra={"subject": subject, "provider": provider.value},
        )
        return self._to_record(item, include_secrets=False)

    def delete(self, subject: str, provider: Provider = Provider.LINKEDIN) -> None:
        """Remove the record; a missing record is not an error."""
        self._backend.delete_item(
            partition_key=_partition_key(subject),
            sort_key=_sort_key(provider),
        )

    def find_expiring_within(
        self,
        within: timedelta,
        provider: Optional[Provider] = None,
        *,
        now: Optional[datetime] = None,
    ) -> List[OAuthTokenRecord]:
        """Refreshable records whose access token expires before ``now + within``.

        Records are returned with secrets since the only consumer is the
        refresh sweep.
        """
        cutoff = (now or utcnow()) + within
        prefix = _sort_key(provider) if provider else _SORT_KEY_PREFIX
        items = self._backend.scan_expiring(
            sort_key_prefix=prefix,
            expires_field="access_expires_at",
            cutoff=_to_iso(cutoff),
            required_field="refresh_token_encrypted",
        )
        return [self._to_record(item, include_secrets=True) for item in items]

    def _to_record(self, item: Dict[str, Any], *, include_secrets: bool) -> OAuthTokenRecord:
        encrypted_refresh = item.get("refresh_token_encrypted")
        access_token = refresh_token = None
        if include_secrets:
            access_token = self._cipher.decrypt(item["access_token_encrypted"])
            if encrypted_refresh:
                refresh_token = self._cipher.decrypt(encrypted_refresh)
        return OAuthTokenRecord(
            subject=item["subject"],
            provider=Provider(item.get("provider", Provider.LINKEDIN.value)),
            access_token=access_token,
            refresh_token=refresh_token,
            has_refresh_token=bool(encrypted_refresh),
            token_type=item.get("token_type") or "Bearer",
            access_expires_at=_from_iso(item["access_expires_at"]),
            refresh_expires_at=_from_iso(item.get("refresh_expires_at")),
            scope=item.get("scope"),
            created_at=_from_iso(item.get("created_at")) or utcnow(),
            updated_at=_from_iso(item.get("updated_at")) or utcnow(),
        )


__all__ = ["OAuthTokenStore", "RecordBackend"]
