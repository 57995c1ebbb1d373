"""
FastAPI application entrypoint for the LinkedIn OAuth service.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.errors import register_exception_handlers
from app.api.routes import api_router, auth_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="LinkedIn OAuth Token Service",
        version="0.1.0",
        description="LinkedIn sign-in, token storage and automatic token refresh.",
    )
    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
