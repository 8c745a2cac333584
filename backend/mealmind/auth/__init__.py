"""Auth core: credentials, access tokens and refresh sessions."""

from mealmind.auth.http import handle_http_exception
from mealmind.auth.models import LoginRequest
from mealmind.auth.models import LogoutRequest
from mealmind.auth.models import RefreshRequest
from mealmind.auth.models import RegisterRequest
from mealmind.auth.service import AuthService
from mealmind.auth.schema import init_auth_schema

__all__ = [
    "AuthService",
    "LoginRequest",
    "LogoutRequest",
    "RefreshRequest",
    "RegisterRequest",
    "handle_http_exception",
    "init_auth_schema",
]
