"""Response bodies of the authentication endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AuthUser(_CamelModel):
    id: str
    name: str
    profile_url: Optional[str] = Field(None, alias="profileUrl")


class CallbackResponse(_CamelModel):
    success: bool = True
    message: str = "Authentication successful"
    user: AuthUser


class StatusResponse(_CamelModel):
    authenticated: bool
    message: Optional[str] = None
    user: Optional[AuthUser] = None


class LogoutResponse(_CamelModel):
    success: bool = True
    message: str = "Logged out successfully"


class RefreshResponse(_CamelModel):
    success: bool = True
    message: str = "Token refreshed successfully"
    access_token: str = Field(..., alias="accessToken")


class ErrorResponse(_CamelModel):
    error: str = Field(..., description="Stable machine-readable error code.")
    message: str
    details: Optional[str] = None
    user_cancelled: Optional[bool] = Field(None, alias="userCancelled")


__all__ = [
    "AuthUser",
    "CallbackResponse",
    "ErrorResponse",
    "LogoutResponse",
    "RefreshResponse",
    "StatusResponse",
]
