"""
Domain models for authenticated members.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.oauth import Provider, utcnow


class ProviderIdentity(BaseModel):
    """Normalized identity returned by the provider's userinfo endpoint."""

    subject: str = Field(..., description="Stable member id issued by the provider.")
    name: str
    email: Optional[str] = None
    picture: Optional[str] = None
    profile_url: Optional[str] = None


class UserRecord(BaseModel):
    """Local user, keyed by the provider's stable subject id."""

    id: str
    name: str
    provider: Provider = Provider.LINKEDIN
    provider_subject: str
    email: Optional[str] = None
    profile_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None


__all__ = ["ProviderIdentity", "UserRecord"]
