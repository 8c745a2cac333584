"""Email normalization and validation helpers for auth."""

from __future__ import annotations

import unicodedata

import regex

from mealmind.core.errors import AuthValidationError

MAX_EMAIL_LENGTH = 254
_EMAIL_PATTERN = regex.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailValidationError(AuthValidationError):
    """Raised when an email violates auth validation rules."""


def normalize_email(raw_email: str) -> str:
    """Trim, normalize to NFC and lower-case an email address."""
    return unicodedata.normalize("NFC", raw_email.strip()).lower()


def validate_email(email: str) -> None:
    """Validate email shape and length."""
    if len(email) > MAX_EMAIL_LENGTH:
        raise EmailValidationError(f"email must be at most {MAX_EMAIL_LENGTH} characters")
    if not _EMAIL_PATTERN.match(email):
        raise EmailValidationError("invalid email")


def normalize_and_validate_email(raw_email: str) -> str:
    """Apply trim + NFC + lower-case and validate shape."""
    normalized = normalize_email(raw_email)
    validate_email(normalized)
    return normalized
