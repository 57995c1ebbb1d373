from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.clients.linkedin_auth import LinkedInOAuthClient
from app.core.errors import IdentityFetchFailed, TokenExchangeFailed, TransportError


def _client(linkedin_settings, oauth_settings, handler) -> LinkedInOAuthClient:
    return LinkedInOAuthClient(
        linkedin_settings,
        oauth_settings,
        transport=httpx.MockTransport(handler),
    )


def test_authorization_url_carries_all_parameters(linkedin_settings, oauth_settings) -> None:
    client = LinkedInOAuthClient(linkedin_settings, oauth_settings)

    url = client.build_authorization_url(state="st&ate=1")

    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
        "https://www.linkedin.com/oauth/v2/authorization"
    )
    params = parse_qs(parsed.query)
    assert params == {
        "response_type": ["code"],
        "client_id": ["client-123"],
        "redirect_uri": ["https://app.example.com/auth/linkedin/callback"],
        "scope": ["openid profile email"],
        "state": ["st&ate=1"],
    }
    assert "scope=openid+profile+email" in parsed.query


@pytest.mark.anyio
async def test_exchange_posts_form_and_parses_payload(linkedin_settings, oauth_settings) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(
            200,
            json={
                "access_token": "AQX",
                "expires_in": 5184000,
                "refresh_token": "AQR",
                "refresh_token_expires_in": 31536000,
                "scope": "openid,profile,email",
            },
        )

    client = _client(linkedin_settings, oauth_settings, handler)

    payload = await client.exchange_authorization_code("auth-code")

    assert seen["url"] == "https://www.linkedin.com/oauth/v2/accessToken"
    assert seen["content_type"] == "application/x-www-form-urlencoded"
    assert seen["form"] == {
        "grant_type": ["authorization_code"],
        "code": ["auth-code"],
        "redirect_uri": ["https://app.example.com/auth/linkedin/callback"],
        "client_id": ["client-123"],
        "client_secret": ["shh"],
    }
    assert payload.access_token == "AQX"
    assert payload.expires_in == 5184000
    assert payload.refresh_token == "AQR"
    assert payload.refresh_token_expires_in == 31536000


@pytest.mark.anyio
async def test_refresh_sends_refresh_grant(linkedin_settings, oauth_settings) -> None:
    forms = []

    def handler(request: httpx.Request) -> httpx.Response:
        forms.append(parse_qs(request.content.decode()))
        return httpx.Response(200, json={"access_token": "new", "expires_in": 60})

    client = _client(linkedin_settings, oauth_settings, handler)

    payload = await client.refresh_token("AQR")

    assert forms[0]["grant_type"] == ["refresh_token"]
    assert forms[0]["refresh_token"] == ["AQR"]
    assert "code" not in forms[0]
    assert payload.refresh_token is None


@pytest.mark.anyio
async def test_provider_rejection_maps_to_token_exchange_failed(
    linkedin_settings, oauth_settings
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "code already used"},
        )

    client = _client(linkedin_settings, oauth_settings, handler)

    with pytest.raises(TokenExchangeFailed) as excinfo:
        await client.exchange_authorization_code("used-code")

    assert excinfo.value.provider_code == "invalid_grant"
    assert excinfo.value.provider_message == "code already used"


@pytest.mark.anyio
async def test_unstructured_rejection_uses_http_status_code(
    linkedin_settings, oauth_settings
) -> None:
    client = _client(
        linkedin_settings,
        oauth_settings,
        lambda request: httpx.Response(401, text="nope"),
    )

    with pytest.raises(TokenExchangeFailed) as excinfo:
        await client.refresh_token("AQR")

    assert excinfo.value.provider_code == "http_401"


@pytest.mark.anyio
async def test_incomplete_payload_is_invalid_response(linkedin_settings, oauth_settings) -> None:
    client = _client(
        linkedin_settings,
        oauth_settings,
        lambda request: httpx.Response(200, json={"expires_in": 60}),
    )

    with pytest.raises(TokenExchangeFailed) as excinfo:
        await client.exchange_authorization_code("code")

    assert excinfo.value.provider_code == "invalid_response"


@pytest.mark.anyio
async def test_server_error_and_timeout_map_to_transport_error(
    linkedin_settings, oauth_settings
) -> None:
    def unavailable(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        await _client(linkedin_settings, oauth_settings, unavailable).refresh_token("r")
    with pytest.raises(TransportError):
        await _client(linkedin_settings, oauth_settings, timeout).exchange_authorization_code("c")


@pytest.mark.anyio
async def test_fetch_identity_sends_bearer_and_version(linkedin_settings, oauth_settings) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["authorization"] = request.headers["authorization"]
        seen["version"] = request.headers["linkedin-version"]
        return httpx.Response(
            200,
            json={
                "sub": "li-123",
                "given_name": "Grace",
                "family_name": "Hopper",
                "email": "grace@example.com",
            },
        )

    identity = await _client(linkedin_settings, oauth_settings, handler).fetch_identity("AQX")

    assert seen == {"authorization": "Bearer AQX", "version": "202401"}
    assert identity.subject == "li-123"
    assert identity.name == "Grace Hopper"
    assert identity.email == "grace@example.com"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"message": "Invalid access token"}),
        httpx.Response(200, json={"name": "No Subject"}),
        httpx.Response(200, text="<html>"),
    ],
    ids=["unauthorized", "no-subject", "not-json"],
)
async def test_fetch_identity_failures(linkedin_settings, oauth_settings, response) -> None:
    client = _client(linkedin_settings, oauth_settings, lambda request: response)

    with pytest.raises(IdentityFetchFailed):
        await client.fetch_identity("AQX")
