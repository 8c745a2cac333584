"""Password hashing helpers for auth services."""

from __future__ import annotations

import logging
import secrets

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from mealmind.core.errors import MalformedPasswordHashError
from mealmind.core.errors import PasswordPolicyError

logger = logging.getLogger("mealmind.auth.password")

DEFAULT_MAX_PASSWORD_BYTES = 256

# Keep algorithms centralized so auth code only depends on these helpers.
_PASSWORD_CONTEXT = CryptContext(schemes=["argon2"], deprecated="auto")

# Verified against when the account does not exist, so a missing user costs
# the same as a wrong password.
_DUMMY_HASH = _PASSWORD_CONTEXT.hash(secrets.token_urlsafe(16))


def check_password_policy(plain_password: str, *, max_length: int = DEFAULT_MAX_PASSWORD_BYTES) -> None:
    """Reject empty passwords and passwords longer than ``max_length`` UTF-8 bytes."""
    if not plain_password:
        raise PasswordPolicyError("password must not be empty")
    if len(plain_password.encode("utf-8")) > max_length:
        raise PasswordPolicyError(f"password must be at most {max_length} bytes")


def hash_password(plain_password: str, *, max_length: int = DEFAULT_MAX_PASSWORD_BYTES) -> str:
    """Hash plaintext password using argon2 with a random salt."""
    check_password_policy(plain_password, max_length=max_length)
    return _PASSWORD_CONTEXT.hash(plain_password)


def verify_password(
    plain_password: str,
    password_hash: str,
    *,
    max_length: int = DEFAULT_MAX_PASSWORD_BYTES,
) -> bool:
    """Verify plaintext password against a stored hash.

    Returns ``False`` on mismatch. Raises :class:`MalformedPasswordHashError`
    when ``password_hash`` is not a parseable hash, which points at data
    corruption rather than a failed login.
    """
    check_password_policy(plain_password, max_length=max_length)
    try:
        return _PASSWORD_CONTEXT.verify(plain_password, password_hash)
    except (UnknownHashError, ValueError, TypeError) as exc:
        logger.error("stored password hash is malformed")
        raise MalformedPasswordHashError("stored password hash is malformed") from exc


def dummy_verify(plain_password: str) -> None:
    """Spend one verification on a throwaway hash to equalize login timing."""
    _PASSWORD_CONTEXT.verify(plain_password, _DUMMY_HASH)
