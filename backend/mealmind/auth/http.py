"""HTTP helpers for unified API errors."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

_ERROR_FIELDS = frozenset({"code", "message", "detail"})


def api_error(*, code: str, message: str, detail: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a unified API error payload."""
    return {"code": code, "message": message, "detail": detail or {}}


def _error_body(exc: HTTPException) -> dict[str, Any]:
    # Routes raise pre-built payloads; framework errors (404, 405) carry text.
    if isinstance(exc.detail, dict) and _ERROR_FIELDS <= exc.detail.keys():
        return exc.detail
    return api_error(code="HTTP_ERROR", message=str(exc.detail))


async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
    """Render any HTTPException as a {code,message,detail} body."""
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=exc.headers)


async def handle_request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with field locations only."""
    fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
    return JSONResponse(
        status_code=400,
        content=api_error(
            code="VALIDATION_ERROR",
            message="malformed request body",
            detail={"fields": fields},
        ),
    )
