"""JWT access token codec.

Access tokens carry a fixed, versioned claim set and are verified from their
signature and lifetime alone. There is no revocation list: a token stays
valid until ``exp``, which is why the access TTL is kept short.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Any

import jwt

from mealmind.core.errors import InvalidSessionError

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
CLAIMS_VERSION = 1
REQUIRED_CLAIMS = ("sub", "iat", "exp", "iss", "aud", "typ", "ver")


class AccessTokenError(InvalidSessionError):
    """Base access token error."""


class AccessTokenInvalidError(AccessTokenError):
    """Raised when an access token cannot be decoded or is malformed."""


class AccessTokenExpiredError(AccessTokenError):
    """Raised when an access token is expired."""


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Decoded access token contents (claims schema version 1)."""

    user_id: str
    issued_at: int
    expires_at: int


def _epoch(value: datetime) -> int:
    return int(value.astimezone(timezone.utc).timestamp())


@dataclass(frozen=True)
class TokenCodec:
    """Sign and verify access tokens with one process-wide secret."""

    secret: str
    issuer: str
    audience: str
    ttl_seconds: int
    leeway_seconds: int = 0

    def issue(self, user_id: str, *, now: datetime) -> str:
        """Create an access token valid on ``[now, now + ttl)``."""
        payload = {
            "sub": str(user_id),
            "iat": _epoch(now),
            "exp": _epoch(now + timedelta(seconds=self.ttl_seconds)),
            "iss": self.issuer,
            "aud": self.audience,
            "typ": TOKEN_TYPE,
            "ver": CLAIMS_VERSION,
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def decode(self, token: str, *, now: datetime) -> dict[str, Any]:
        """Decode and validate an access token, returning the raw claims."""
        try:
            # Time checks are done below against the caller's clock.
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise AccessTokenInvalidError("invalid access token") from exc

        version = payload.get("ver")
        if payload.get("typ") != TOKEN_TYPE or type(version) is not int or version != CLAIMS_VERSION:
            raise AccessTokenInvalidError("unexpected token type or version")

        iat = payload.get("iat")
        exp = payload.get("exp")
        if type(iat) is not int or type(exp) is not int:
            raise AccessTokenInvalidError("missing or invalid iat/exp")
        if not isinstance(payload.get("sub"), str) or not payload["sub"]:
            raise AccessTokenInvalidError("missing or invalid sub")

        now_ts = _epoch(now)
        if iat > now_ts + self.leeway_seconds:
            raise AccessTokenInvalidError("access token issued in the future")
        if now_ts >= exp + self.leeway_seconds:
            raise AccessTokenExpiredError("access token expired")

        return payload

    def verify(self, token: str, *, now: datetime) -> AccessClaims:
        """Verify an access token and return its typed claims."""
        payload = self.decode(token, now=now)
        return AccessClaims(
            user_id=payload["sub"],
            issued_at=payload["iat"],
            expires_at=payload["exp"],
        )
