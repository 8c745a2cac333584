"""POST /auth/login contract tests."""

from __future__ import annotations

import asyncio
import json
from types import ModuleType

import pytest
from fastapi import HTTPException
from starlette.requests import Request

HTTP_SCOPE = {
    "type": "http",
    "method": "POST",
    "path": "/auth/login",
    "headers": [],
    "query_string": b"",
}


def _http_error_payload(app_main: ModuleType, exc: HTTPException) -> tuple[int, dict[str, object]]:
    response = asyncio.run(app_main.handle_http_exception(Request(HTTP_SCOPE), exc))
    return response.status_code, json.loads(response.body.decode("utf-8"))


def test_login_success_returns_new_token_pair(
    app_main: ModuleType,
    register_payload: dict[str, str],
) -> None:
    registered = app_main.register(app_main.RegisterRequest(**register_payload))

    logged_in = app_main.login(app_main.LoginRequest(**register_payload))

    assert logged_in["refresh_token"] != registered["refresh_token"]
    assert logged_in["user"] == registered["user"]
    assert app_main.me(logged_in["access_token"])["email"] == "a@x.com"


def test_login_keeps_other_device_sessions_alive(
    app_main: ModuleType,
    register_payload: dict[str, str],
) -> None:
    first = app_main.register(app_main.RegisterRequest(**register_payload))
    app_main.login(app_main.LoginRequest(**register_payload))

    refreshed = app_main.refresh(app_main.RefreshRequest(refresh_token=first["refresh_token"]))

    assert refreshed["user"]["email"] == "a@x.com"


@pytest.mark.parametrize(
    "body",
    [
        {"email": "a@x.com", "password": "wrong-password"},
        {"email": "nobody@x.com", "password": "secret123"},
    ],
)
def test_login_failure_returns_401_with_unified_error_shape(
    app_main: ModuleType,
    register_payload: dict[str, str],
    body: dict[str, str],
) -> None:
    """Contract: unknown email and wrong password are indistinguishable."""
    app_main.register(app_main.RegisterRequest(**register_payload))

    with pytest.raises(HTTPException) as exc_info:
        app_main.login(app_main.LoginRequest(**body))

    status_code, payload = _http_error_payload(app_main, exc_info.value)
    assert status_code == 401
    assert payload == {
        "code": "AUTH_INVALID_CREDENTIALS",
        "message": "invalid email or password",
        "detail": {},
    }
