"""Clock helpers and token envelope construction for auth endpoints."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def from_utc_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def build_token_envelope(
    *,
    access_token: str,
    access_expires_in: int,
    refresh_token: str,
    refresh_expires_in: int,
    user_id: str,
    email: str,
) -> dict[str, object]:
    """Shape the response returned by register, login and refresh."""
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": access_expires_in,
        "refresh_token": refresh_token,
        "refresh_expires_in": refresh_expires_in,
        "user": {"id": user_id, "email": email},
    }
