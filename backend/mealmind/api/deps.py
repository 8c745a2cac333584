"""Dependency helpers shared by API routers."""

from __future__ import annotations

from fastapi import Header

import mealmind.runtime as runtime
from mealmind.auth.errors import auth_errors_as_http
from mealmind.auth.errors import raise_token_invalid


def me(access_token: str) -> dict[str, object]:
    """Return current user profile for a valid access token."""
    with auth_errors_as_http():
        return runtime.auth_service.current_user(access_token)


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if authorization is None:
        raise_token_invalid()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise_token_invalid()
    return token.strip()


def require_user_id(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> str:
    """Resolve the acting user id from the access token alone."""
    token = bearer_token(authorization)
    with auth_errors_as_http():
        return runtime.auth_service.validate(token)


def require_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, object]:
    """Read and validate Bearer access token from Authorization header."""
    return me(bearer_token(authorization))
