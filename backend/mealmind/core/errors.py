"""Domain error taxonomy shared by the auth core and its stores."""

from __future__ import annotations


class AuthError(Exception):
    """Base class for auth-domain errors."""


class AuthValidationError(AuthError, ValueError):
    """Raised when request input is malformed (bad email, password policy)."""


class PasswordPolicyError(AuthValidationError):
    """Raised when a password is empty, too short, or too long."""


class InvalidCredentialsError(AuthError):
    """Raised on login failure without revealing which field was wrong."""


class ConflictError(AuthError):
    """Raised when registering an email that already exists."""


class InvalidSessionError(AuthError):
    """Raised when a refresh session or access token cannot be used."""


class SessionConflictError(AuthError):
    """Raised by a session store when rotating a session that is not active."""


class StoreUnavailableError(AuthError):
    """Raised when an underlying store fails; never carries store internals."""


class MalformedPasswordHashError(AuthError):
    """Raised when a stored password hash cannot be parsed."""
