"""Local user records keyed by the provider's stable member id."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from app.models.oauth import utcnow
from app.models.user import ProviderIdentity, UserRecord
from app.services.token_store import RecordBackend

logger = logging.getLogger(__name__)


class UserRepository:
    """Stores users at ``user#<id>/profile`` plus an identity lookup document."""

    def __init__(self, backend: RecordBackend) -> None:
        self._backend = backend

    def get(self, user_id: str) -> Optional[UserRecord]:
        item = self._backend.get_item(partition_key=f"user#{user_id}", sort_key="profile")
        if not item:
            return None
        return UserRecord.model_validate(
            {k: v for k, v in item.items() if k not in {"pk", "sk"}}
        )

    def find_by_identity(self, identity: ProviderIdentity, provider: str) -> Optional[UserRecord]:
        link = self._backend.get_item(
            partition_key=f"identity#{provider}#{identity.subject}",
            sort_key="user",
        )
        if not link:
            return None
        return self.get(link["user_id"])

    def find_or_create(self, identity: ProviderIdentity, provider: str = "linkedin") -> UserRecord:
        """Return the user linked to ``identity``, creating one on first login."""
        now = utcnow()
        user = self.find_by_identity(identity, provider)
        if user is None:
            user = UserRecord(
                id=uuid.uuid4().hex,
                name=identity.name or "LinkedIn User",
                provider=provider,
                provider_subject=identity.subject,
                email=identity.email,
                profile_url=identity.profile_url,
                created_at=now,
            )
            self._backend.put_item(
                {
                    "pk": f"identity#{provider}#{identity.subject}",
                    "sk": "user",
                    "user_id": user.id,
                }
            )
            logger.info("Created user for new member", extra={"user_id": user.id})
        else:
            user = user.model_copy(
                update={
                    "name": identity.name or user.name,
                    "email": identity.email or user.email,
                    "profile_url": identity.profile_url or user.profile_url,
                }
            )
        user = user.model_copy(update={"updated_at": now, "last_login_at": now})
        self._save(user)
        return user

    def _save(self, user: UserRecord) -> None:
        item = user.model_dump(mode="json")
        item.update({"pk": f"user#{user.id}", "sk": "profile"})
        self._backend.put_item(item)


__all__ = ["UserRepository"]
