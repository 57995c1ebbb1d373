"""
LinkedIn OAuth 2.0 utilities.

Builds the consent URL and performs the token endpoint and userinfo calls of
the 3-legged authorization-code flow. Every method makes exactly one HTTP
request and never retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from app.core.config import LinkedInSettings, OAuthSettings
from app.core.errors import IdentityFetchFailed, TokenExchangeFailed, TransportError
from app.models.oauth import Provider, TokenPayload
from app.models.user import ProviderIdentity

logger = logging.getLogger(__name__)


def _error_fields(response: httpx.Response) -> tuple[Optional[str], Optional[str]]:
    """Pull ``error``/``error_description`` (or ``message``) out of a JSON body."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    code = body.get("error") or body.get("serviceErrorCode") or body.get("code")
    message = body.get("error_description") or body.get("message")
    return (str(code) if code is not None else None), message


class LinkedInOAuthClient:
    """Build LinkedIn authorization URLs and exchange codes and refresh tokens."""

    provider = Provider.LINKEDIN

    def __init__(
        self,
        linkedin_settings: LinkedInSettings,
        oauth_settings: OAuthSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._linkedin = linkedin_settings
        self._oauth = oauth_settings
        self._transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._oauth.http_timeout_seconds,
            transport=self._transport,
        )

    def build_authorization_url(self, state: str) -> str:
        """Construct the LinkedIn consent URL for ``state``."""
        params = {
            "response_type": "code",
            "client_id": self._linkedin.client_id,
            "redirect_uri": str(self._linkedin.redirect_uri),
            "scope": " ".join(self._linkedin.scopes),
            "state": state,
        }
        return f"{self._linkedin.authorization_url}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> TokenPayload:
        """Exchange an authorization code for a token payload."""
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": str(self._linkedin.redirect_uri),
                "client_id": self._linkedin.client_id,
                "client_secret": self._linkedin.client_secret,
            }
        )

    async def refresh_token(self, refresh_token: str) -> TokenPayload:
        """Mint a new access token from a stored refresh token."""
        return await self._token_request(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self._linkedin.client_id,
                "client_secret": self._linkedin.client_secret,
            }
        )

    async def fetch_identity(self, access_token: str) -> ProviderIdentity:
        """Load the member behind ``access_token`` from the userinfo endpoint."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "LinkedIn-Version": self._linkedin.api_version,
        }
        try:
            async with self._http_client() as client:
                response = await client.get(self._linkedin.userinfo_url, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"Userinfo request failed: {exc!r}") from exc

        if not response.is_success:
            _, message = _error_fields(response)
            raise IdentityFetchFailed(response.status_code, message or response.reason_phrase)

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise IdentityFetchFailed(response.status_code, "Userinfo body is not JSON.") from exc
        subject = data.get("sub") or data.get("id") if isinstance(data, dict) else None
        if not subject:
            raise IdentityFetchFailed(response.status_code, "Userinfo response has no subject.")
        name = data.get("name") or " ".join(
            part for part in (data.get("given_name"), data.get("family_name")) if part
        )
        return ProviderIdentity(
            subject=str(subject),
            name=name or "LinkedIn User",
            email=data.get("email"),
            picture=data.get("picture"),
            profile_url=data.get("profile"),
        )

    async def _token_request(self, form: Dict[str, str]) -> TokenPayload:
        grant_type = form["grant_type"]
        try:
            async with self._http_client() as client:
                response = await client.post(
                    self._linkedin.token_url,
                    data=form,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise TransportError(f"Token request ({grant_type}) failed: {exc!r}") from exc

        if response.status_code >= 500:
            raise TransportError(
                f"Token endpoint returned HTTP {response.status_code} for {grant_type}."
            )
        if not response.is_success:
            code, message = _error_fields(response)
            logger.warning(
                "Token endpoint rejected %s grant: %s %s",
                grant_type,
                code,
                message,
            )
            raise TokenExchangeFailed(code or f"http_{response.status_code}", message)

        try:
            return TokenPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeFailed(
                "invalid_response",
                f"Incomplete token payload returned for {grant_type}.",
            ) from exc


__all__ = ["LinkedInOAuthClient"]
