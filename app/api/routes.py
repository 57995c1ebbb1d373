"""
FastAPI routes for the LinkedIn OAuth flow and token-gated APIs.
"""

from __future__ import annotations

import logging
import time
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from app.api.errors import render_oauth_error
from app.core.errors import (
    MissingCode,
    MissingState,
    OAuthError,
    StateMismatch,
    Unauthorized,
    UserDenied,
)
from app.dependencies import (
    get_access_gate,
    get_app_settings,
    get_linkedin_oauth_client,
    get_session,
    get_session_codec,
    get_token_manager,
    get_user_repository,
    load_session,
    require_linkedin_auth,
    resolve_subject,
    save_session,
)
from app.models.oauth import Provider
from app.schemas import (
    AuthUser,
    CallbackResponse,
    LogoutResponse,
    RefreshResponse,
    StatusResponse,
)
from app.services import AuthContext, generate_state, validate_state

auth_router = APIRouter(tags=["auth"])
api_router = APIRouter(tags=["linkedin"])
logger = logging.getLogger(__name__)


def _json(model: Any, status_code: int = HTTPStatus.OK) -> JSONResponse:
    return JSONResponse(
        status_code=int(status_code),
        content=model.model_dump(by_alias=True, exclude_none=True),
    )


def _auth_user(user: Any) -> AuthUser:
    return AuthUser(id=user.id, name=user.name, profile_url=user.profile_url)


@api_router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@auth_router.get("/auth/status", response_model=StatusResponse)
async def auth_status(
    request: Request,
    session: Annotated[dict, Depends(get_session)],
    gate: Annotated[Any, Depends(get_access_gate)],
    users: Annotated[Any, Depends(get_user_repository)],
    subject: Optional[str] = Query(None, description="Subject to check when no session."),
) -> JSONResponse:
    """Report whether the caller currently holds a usable token."""
    context = await gate.optional(resolve_subject(request, session, subject))
    if context is None:
        return _json(StatusResponse(authenticated=False, message="Not authenticated"))
    user = users.get(context.subject)
    return _json(
        StatusResponse(
            authenticated=True,
            user=_auth_user(user) if user else None,
        )
    )


@auth_router.post("/auth/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    token_manager: Annotated[Any, Depends(get_token_manager)],
    codec: Annotated[Any, Depends(get_session_codec)],
    settings: Annotated[Any, Depends(get_app_settings)],
    subject: Optional[str] = Query(None),
) -> JSONResponse:
    """Revoke stored tokens for the caller and drop the session."""
    session = load_session(request, codec, settings.security)
    resolved = resolve_subject(request, session, subject)
    if not resolved:
        raise Unauthorized("Logout requested without a subject.")
    token_manager.revoke(resolved)
    response = _json(LogoutResponse())
    save_session(response, {}, codec, settings.security)
    return response


@auth_router.post("/auth/refresh", response_model=RefreshResponse)
async def refresh_access_token(
    request: Request,
    session: Annotated[dict, Depends(get_session)],
    token_manager: Annotated[Any, Depends(get_token_manager)],
    subject: Optional[str] = Query(None),
) -> JSONResponse:
    """Force resolution of a valid access token, refreshing if it expired."""
    resolved = resolve_subject(request, session, subject)
    if not resolved:
        raise Unauthorized("Refresh requested without a subject.")
    access_token = await token_manager.get_valid_access_token(resolved)
    return _json(RefreshResponse(access_token=access_token))


@auth_router.get("/auth/{provider}", status_code=HTTPStatus.FOUND)
async def start_oauth_flow(
    provider: Provider,
    request: Request,
    oauth_client: Annotated[Any, Depends(get_linkedin_oauth_client)],
    codec: Annotated[Any, Depends(get_session_codec)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> Response:
    """Kick off the OAuth flow: mint a state nonce and redirect to consent."""
    state = generate_state()
    session = load_session(request, codec, settings.security)
    session["oauth_state"] = state
    session["oauth_state_issued_at"] = time.time()

    authorization_url = oauth_client.build_authorization_url(state=state)
    response = RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)
    save_session(
        response, session, codec, settings.security, secure=not settings.is_development
    )
    logger.info("Starting %s authorization", provider.value)
    return response


@auth_router.get("/auth/{provider}/callback", response_model=CallbackResponse)
async def handle_oauth_callback(
    provider: Provider,
    request: Request,
    oauth_client: Annotated[Any, Depends(get_linkedin_oauth_client)],
    token_manager: Annotated[Any, Depends(get_token_manager)],
    users: Annotated[Any, Depends(get_user_repository)],
    codec: Annotated[Any, Depends(get_session_codec)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: Optional[str] = Query(None, description="Authorization code."),
    state: Optional[str] = Query(None, description="State nonce echoed back."),
    error: Optional[str] = Query(None),
    error_description: Optional[str] = Query(None),
) -> Response:
    """Complete the exchange, link the member to a local user and open a session.

    The state nonce held in the session is consumed on every outcome.
    """
    session = load_session(request, codec, settings.security)
    expected_state = session.pop("oauth_state", None)
    issued_at = session.pop("oauth_state_issued_at", None)
    secure = not settings.is_development

    try:
        if error:
            raise UserDenied(error, error_description)
        if not code:
            raise MissingCode()
        if not state:
            raise MissingState()
        if issued_at is not None and time.time() - issued_at > settings.oauth.state_ttl_seconds:
            raise StateMismatch("State nonce has expired.")
        validate_state(expected_state, state)

        payload = await oauth_client.exchange_authorization_code(code)
        identity = await oauth_client.fetch_identity(payload.access_token)
        user = users.find_or_create(identity, provider.value)
        token_manager.store_tokens(user.id, payload)
    except OAuthError as exc:
        response = render_oauth_error(exc, settings)
        save_session(response, session, codec, settings.security, secure=secure)
        return response

    session["user_id"] = user.id
    response = _json(CallbackResponse(user=_auth_user(user)))
    save_session(response, session, codec, settings.security, secure=secure)
    logger.info("Member authenticated", extra={"user_id": user.id})
    return response


@api_router.get("/linkedin/userinfo")
async def linkedin_userinfo(
    auth: Annotated[AuthContext, Depends(require_linkedin_auth)],
    oauth_client: Annotated[Any, Depends(get_linkedin_oauth_client)],
) -> dict:
    """Protected example: return the member profile fetched with the gated token."""
    identity = await oauth_client.fetch_identity(auth.access_token)
    return {"success": True, "data": identity.model_dump(exclude_none=True)}


__all__ = ["api_router", "auth_router"]
