"""Process-wide runtime state shared by REST handlers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from mealmind.auth.repository import SqliteSessionStore
from mealmind.auth.repository import SqliteUserStore
from mealmind.auth.schema import init_auth_schema
from mealmind.auth.service import AuthService
from mealmind.auth.session import utc_now
from mealmind.core.config import Settings
from mealmind.core.config import load_settings
from mealmind.core.tokens import TokenCodec

settings: Settings
auth_service: AuthService


def build_token_codec(settings: Settings) -> TokenCodec:
    """Build the access token codec; the signing secret is fixed here."""
    return TokenCodec(
        secret=settings.mealmind_jwt_secret,
        issuer=settings.mealmind_jwt_issuer,
        audience=settings.mealmind_jwt_audience,
        ttl_seconds=settings.access_token_ttl_seconds,
        leeway_seconds=settings.mealmind_token_leeway_seconds,
    )


def build_auth_service(
    settings: Settings,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> AuthService:
    """Wire the auth service against the configured SQLite stores."""
    return AuthService(
        users=SqliteUserStore(settings.mealmind_sqlite_path),
        sessions=SqliteSessionStore(settings.mealmind_sqlite_path),
        codec=build_token_codec(settings),
        refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
        password_min_length=settings.mealmind_password_min_length,
        password_max_length=settings.mealmind_password_max_length,
        clock=clock,
    )


def startup() -> None:
    """Load settings, ensure the auth schema exists and build the auth service."""
    global settings, auth_service
    settings = load_settings()
    init_auth_schema(settings)
    auth_service = build_auth_service(settings)


__all__ = [
    "Settings",
    "auth_service",
    "build_auth_service",
    "build_token_codec",
    "settings",
    "startup",
]
