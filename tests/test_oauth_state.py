from __future__ import annotations

import base64
import time

import pytest

from app.core.errors import StateMismatch
from app.services.oauth_state import (
    InvalidSession,
    SessionCookieCodec,
    generate_state,
    validate_state,
)


def test_generate_state_is_unique_hex() -> None:
    states = {generate_state() for _ in range(50)}

    assert len(states) == 50
    for state in states:
        assert len(state) == 64
        int(state, 16)


def test_validate_state_accepts_identical_values() -> None:
    state = generate_state()
    validate_state(state, state)


@pytest.mark.parametrize(
    "expected, received",
    [("abc", "abd"), (None, "abc"), ("abc", None), ("", "")],
)
def test_validate_state_rejects(expected, received) -> None:
    with pytest.raises(StateMismatch):
        validate_state(expected, received)


def test_session_codec_round_trip() -> None:
    codec = SessionCookieCodec("cookie-secret", max_age_seconds=60)

    token = codec.encode({"oauth_state": "abc", "user_id": "u1"})

    assert codec.decode(token) == {"oauth_state": "abc", "user_id": "u1"}


def test_session_codec_rejects_tampering() -> None:
    codec = SessionCookieCodec("cookie-secret", max_age_seconds=60)
    token = codec.encode({"user_id": "u1"})
    raw = bytearray(base64.urlsafe_b64decode(token))
    raw[-3] ^= 0x01
    tampered = base64.urlsafe_b64encode(bytes(raw)).decode()

    with pytest.raises(InvalidSession):
        codec.decode(tampered)
    with pytest.raises(InvalidSession):
        SessionCookieCodec("other-secret", 60).decode(token)
    with pytest.raises(InvalidSession):
        codec.decode("%%%not-base64")


def test_session_codec_rejects_expired_cookie(monkeypatch) -> None:
    codec = SessionCookieCodec("cookie-secret", max_age_seconds=60)
    token = codec.encode({"user_id": "u1"})

    later = time.time() + 120
    monkeypatch.setattr(time, "time", lambda: later)

    with pytest.raises(InvalidSession):
        codec.decode(token)
