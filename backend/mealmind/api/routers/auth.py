"""Auth REST routes."""

from __future__ import annotations

from fastapi import APIRouter

import mealmind.runtime as runtime
from mealmind.auth.errors import auth_errors_as_http
from mealmind.auth.models import LoginRequest
from mealmind.auth.models import LogoutRequest
from mealmind.auth.models import RefreshRequest
from mealmind.auth.models import RegisterRequest

router = APIRouter()


@router.post("/auth/register", status_code=201)
def register(payload: RegisterRequest) -> dict[str, object]:
    """Create user and issue its first token pair."""
    with auth_errors_as_http():
        return runtime.auth_service.register(payload.email, payload.password)


@router.post("/auth/login")
def login(payload: LoginRequest) -> dict[str, object]:
    """Authenticate user and issue a fresh auth session."""
    with auth_errors_as_http():
        return runtime.auth_service.login(payload.email, payload.password)


@router.post("/auth/refresh")
def refresh(payload: RefreshRequest) -> dict[str, object]:
    """Rotate refresh token and issue a new access/refresh pair."""
    with auth_errors_as_http():
        return runtime.auth_service.refresh(payload.refresh_token)


@router.post("/auth/logout")
def logout(payload: LogoutRequest) -> dict[str, bool]:
    """Revoke the provided refresh token idempotently."""
    with auth_errors_as_http():
        return runtime.auth_service.logout(payload.refresh_token)
