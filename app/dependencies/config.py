"""
FastAPI dependency utilities for injecting configuration.

Tests override ``get_app_settings`` and the settings groups follow.
"""

from fastapi import Depends

from app.core.config import AppSettings, SecuritySettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


def get_security_settings(
    settings: AppSettings = Depends(get_app_settings),
) -> SecuritySettings:
    return settings.security


__all__ = [
    "get_app_settings",
    "get_security_settings",
]
