"""
Session cookie handling and access-gate dependencies for routers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Response

from app.core.config import SecuritySettings
from app.dependencies.clients import get_access_gate, get_session_codec
from app.dependencies.config import get_security_settings
from app.services import AccessGate, AuthContext, SessionCookieCodec
from app.services.oauth_state import InvalidSession

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-id"


def load_session(
    request: Request,
    codec: SessionCookieCodec,
    security: SecuritySettings,
) -> Dict[str, Any]:
    """Decode the session cookie; a missing or invalid cookie is an empty session."""
    raw = request.cookies.get(security.session_cookie_name)
    if not raw:
        return {}
    try:
        return codec.decode(raw)
    except InvalidSession as exc:
        logger.info("Ignoring session cookie: %s", exc)
        return {}


def save_session(
    response: Response,
    session: Dict[str, Any],
    codec: SessionCookieCodec,
    security: SecuritySettings,
    *,
    secure: bool = False,
) -> None:
    """Write ``session`` back, or delete the cookie when it is empty."""
    if not session:
        response.delete_cookie(security.session_cookie_name, path="/")
        return
    response.set_cookie(
        security.session_cookie_name,
        codec.encode(session),
        max_age=security.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=secure,
        path="/",
    )


def resolve_subject(
    request: Request,
    session: Dict[str, Any],
    explicit: Optional[str] = None,
) -> Optional[str]:
    """Session user first, then an explicit query value, then ``X-User-Id``."""
    return session.get("user_id") or explicit or request.headers.get(USER_ID_HEADER)


async def get_session(
    request: Request,
    codec: SessionCookieCodec = Depends(get_session_codec),
    security: SecuritySettings = Depends(get_security_settings),
) -> Dict[str, Any]:
    return load_session(request, codec, security)


async def require_linkedin_auth(
    request: Request,
    session: Dict[str, Any] = Depends(get_session),
    gate: AccessGate = Depends(get_access_gate),
) -> AuthContext:
    """Reject the request with 401 unless the caller holds a usable token."""
    return await gate.require(resolve_subject(request, session))


__all__ = [
    "USER_ID_HEADER",
    "get_session",
    "load_session",
    "require_linkedin_auth",
    "resolve_subject",
    "save_session",
]
