"""Map auth-domain errors to unified HTTP errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import NoReturn

from fastapi import HTTPException

from mealmind.auth.http import api_error
from mealmind.core.errors import AuthError
from mealmind.core.errors import AuthValidationError
from mealmind.core.errors import ConflictError
from mealmind.core.errors import InvalidCredentialsError
from mealmind.core.errors import InvalidSessionError
from mealmind.core.errors import MalformedPasswordHashError
from mealmind.core.errors import StoreUnavailableError
from mealmind.core.tokens import AccessTokenExpiredError
from mealmind.core.tokens import AccessTokenInvalidError

logger = logging.getLogger("mealmind.api")


def _raise(status_code: int, code: str, message: str, exc: Exception | None = None) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail=api_error(code=code, message=message, detail={}),
        headers={"WWW-Authenticate": "Bearer"} if status_code == 401 else None,
    ) from exc


def raise_validation_error(exc: AuthValidationError) -> NoReturn:
    """Raise a unified input validation error."""
    _raise(400, "VALIDATION_ERROR", str(exc), exc)


def raise_invalid_credentials(exc: Exception | None = None) -> NoReturn:
    """Raise unified invalid-credentials response."""
    _raise(401, "AUTH_INVALID_CREDENTIALS", "invalid email or password", exc)


def raise_email_conflict(exc: Exception | None = None) -> NoReturn:
    """Raise unified email-conflict response."""
    _raise(409, "AUTH_EMAIL_CONFLICT", "email already registered", exc)


def raise_session_invalid(exc: Exception | None = None) -> NoReturn:
    """Raise unified refresh-session rejection."""
    _raise(401, "AUTH_SESSION_INVALID", "invalid or expired refresh token", exc)


def raise_token_invalid(exc: Exception | None = None) -> NoReturn:
    """Raise unified invalid access token response."""
    _raise(401, "AUTH_TOKEN_INVALID", "invalid access token", exc)


def raise_token_expired(exc: Exception | None = None) -> NoReturn:
    """Raise unified expired access token response."""
    _raise(401, "AUTH_TOKEN_EXPIRED", "access token expired", exc)


def raise_store_unavailable(exc: Exception | None = None) -> NoReturn:
    """Raise a generic 503 without leaking store details."""
    _raise(503, "STORE_UNAVAILABLE", "service temporarily unavailable", exc)


def raise_auth_error(exc: AuthError) -> NoReturn:
    """Translate one auth-domain error to its HTTP shape."""
    if isinstance(exc, AuthValidationError):
        raise_validation_error(exc)
    if isinstance(exc, InvalidCredentialsError):
        raise_invalid_credentials(exc)
    if isinstance(exc, ConflictError):
        raise_email_conflict(exc)
    if isinstance(exc, AccessTokenExpiredError):
        raise_token_expired(exc)
    if isinstance(exc, AccessTokenInvalidError):
        raise_token_invalid(exc)
    if isinstance(exc, InvalidSessionError):
        raise_session_invalid(exc)
    if isinstance(exc, MalformedPasswordHashError):
        logger.error("password hash corruption detected")
        raise_store_unavailable(exc)
    if isinstance(exc, StoreUnavailableError):
        logger.error("store unavailable: %s", exc)
        raise_store_unavailable(exc)
    logger.exception("unhandled auth error")
    _raise(500, "INTERNAL_ERROR", "internal error", exc)


@contextmanager
def auth_errors_as_http() -> Iterator[None]:
    """Run a block, re-raising auth-domain errors as unified HTTP errors."""
    try:
        yield
    except AuthError as exc:
        raise_auth_error(exc)
