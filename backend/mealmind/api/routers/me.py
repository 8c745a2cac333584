"""Protected profile route."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Header

from mealmind.api.deps import require_current_user

router = APIRouter()


@router.get("/me")
def me_route(authorization: str | None = Header(default=None, alias="Authorization")) -> dict[str, object]:
    """HTTP wrapper for /me Bearer auth."""
    return require_current_user(authorization)
