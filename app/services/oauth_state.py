"""
CSRF state nonces and the signed session cookie that carries them.

The state nonce is generated right before the redirect to the consent screen,
kept in the caller's session, and compared exactly once on callback.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import secrets
import time
from hashlib import sha256
from typing import Any, Dict, Optional

from app.core.errors import StateMismatch

_STATE_BYTES = 32


def generate_state() -> str:
    """Return a fresh 256-bit nonce as hex text."""
    return secrets.token_hex(_STATE_BYTES)


def validate_state(expected: Optional[str], received: Optional[str]) -> None:
    """Raise ``StateMismatch`` unless both values are present and identical."""
    if not expected or not received:
        raise StateMismatch("State missing from session or callback.")
    if not hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8")):
        raise StateMismatch("State parameter mismatch - potential CSRF attack.")


class InvalidSession(ValueError):
    """Raised when a session cookie is malformed, tampered with or expired."""


class SessionCookieCodec:
    """Encode and decode session payloads with an HMAC-SHA256 signature."""

    _SIGNATURE_SIZE = 32

    def __init__(self, secret_key: str, max_age_seconds: int) -> None:
        self._secret_key = secret_key.encode("utf-8")
        self._max_age = max_age_seconds

    def encode(self, payload: Dict[str, Any]) -> str:
        body = dict(payload, iat=int(time.time()))
        serialized = json.dumps(body, separators=(",", ":"), sort_keys=True).encode("utf-8")
        signature = hmac.new(self._secret_key, serialized, sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise InvalidSession("Session cookie is not valid base64.") from exc
        signature, serialized = decoded[: self._SIGNATURE_SIZE], decoded[self._SIGNATURE_SIZE :]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise InvalidSession("Invalid session signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidSession("Session payload is not JSON.") from exc
        if not isinstance(payload, dict):
            raise InvalidSession("Session payload must be an object.")
        issued_at = payload.pop("iat", 0)
        if time.time() - issued_at > self._max_age:
            raise InvalidSession("Session cookie has expired.")
        return payload


__all__ = [
    "InvalidSession",
    "SessionCookieCodec",
    "generate_state",
    "validate_state",
]
