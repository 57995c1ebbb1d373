"""
Rendering of OAuth failures as HTTP responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import AppSettings
from app.core.errors import OAuthError, UserDenied
from app.dependencies import get_app_settings
from app.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def render_oauth_error(exc: OAuthError, settings: AppSettings) -> JSONResponse:
    """Generic category + stable code; raw provider detail only in development."""
    logger.warning("OAuth request failed (%s): %s", exc.error_code, exc.detail)
    body = ErrorResponse(
        error=exc.error_code,
        message=exc.public_message,
        details=exc.detail if settings.is_development else None,
    )
    if isinstance(exc, UserDenied):
        body.user_cancelled = exc.user_cancelled
    return JSONResponse(
        status_code=int(exc.status_code),
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    async def _handle_oauth_error(request: Request, exc: OAuthError) -> JSONResponse:
        settings = app.dependency_overrides.get(get_app_settings, get_app_settings)()
        return render_oauth_error(exc, settings)

    app.add_exception_handler(OAuthError, _handle_oauth_error)


__all__ = ["register_exception_handlers", "render_oauth_error"]
