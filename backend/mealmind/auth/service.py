"""Auth business logic: register, login, refresh, validate, logout."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
import logging

from mealmind.auth.repository import User
from mealmind.auth.repository import UserStore
from mealmind.auth.session import build_token_envelope
from mealmind.auth.session import to_utc_iso
from mealmind.auth.session import utc_now
from mealmind.core.email import normalize_and_validate_email
from mealmind.core.errors import ConflictError
from mealmind.core.errors import InvalidCredentialsError
from mealmind.core.errors import InvalidSessionError
from mealmind.core.errors import PasswordPolicyError
from mealmind.core.errors import SessionConflictError
from mealmind.core.password import check_password_policy
from mealmind.core.password import dummy_verify
from mealmind.core.password import hash_password
from mealmind.core.password import verify_password
from mealmind.core.refresh_tokens import RefreshSession
from mealmind.core.refresh_tokens import SessionStore
from mealmind.core.tokens import TokenCodec

logger = logging.getLogger("mealmind.auth")

_INVALID_CREDENTIALS = "invalid email or password"
_INVALID_SESSION = "invalid refresh token"


class AuthService:
    """Orchestrate credentials, access tokens and refresh sessions.

    The service keeps no mutable state of its own; everything durable lives in
    ``users`` and ``sessions``. Register issues a token pair immediately, the
    same envelope login returns.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        sessions: SessionStore,
        codec: TokenCodec,
        refresh_ttl_seconds: int,
        password_min_length: int = 8,
        password_max_length: int = 256,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._codec = codec
        self._refresh_ttl = timedelta(seconds=refresh_ttl_seconds)
        self._password_min_length = password_min_length
        self._password_max_length = password_max_length
        self._clock = clock

    def register(self, email: str, password: str) -> dict[str, object]:
        """Create a user and issue its first token pair."""
        normalized_email = normalize_and_validate_email(email)
        check_password_policy(password, max_length=self._password_max_length)
        if len(password) < self._password_min_length:
            raise PasswordPolicyError(
                f"password must be at least {self._password_min_length} characters"
            )

        if self._users.get_by_email(normalized_email) is not None:
            logger.info("register rejected: email already registered")
            raise ConflictError("email already registered")

        password_hash = hash_password(password, max_length=self._password_max_length)
        user = self._users.create(
            email=normalized_email,
            password_hash=password_hash,
            created_at=to_utc_iso(self._clock()),
        )
        logger.info("user registered user_id=%s", user.id)
        return self._issue(user)

    def login(self, email: str, password: str) -> dict[str, object]:
        """Authenticate by email/password and issue a new lineage."""
        normalized_email = normalize_and_validate_email(email)
        check_password_policy(password, max_length=self._password_max_length)

        user = self._users.get_by_email(normalized_email)
        if user is None:
            dummy_verify(password)
            logger.info("login rejected: unknown email")
            raise InvalidCredentialsError(_INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash, max_length=self._password_max_length):
            logger.info("login rejected: bad password user_id=%s", user.id)
            raise InvalidCredentialsError(_INVALID_CREDENTIALS)

        logger.info("user logged in user_id=%s", user.id)
        return self._issue(user)

    def refresh(self, refresh_token: str) -> dict[str, object]:
        """Rotate a refresh session and issue a fresh pair.

        Presenting a rotated or revoked token revokes its whole lineage.
        """
        now = self._clock()
        session = self._sessions.get(refresh_token)
        if session is None:
            raise InvalidSessionError(_INVALID_SESSION)
        if session.revoked or session.rotated:
            self._handle_reuse(session, now=now)
        if session.is_expired(now):
            raise InvalidSessionError(_INVALID_SESSION)

        try:
            new_refresh_token = self._sessions.rotate(
                refresh_token,
                now=now,
                new_expires_at=now + self._refresh_ttl,
            )
        except SessionConflictError:
            # Lost a race against another rotation, revocation or expiry.
            current = self._sessions.get(refresh_token)
            if current is not None and (current.revoked or current.rotated):
                self._handle_reuse(current, now=now)
            raise InvalidSessionError(_INVALID_SESSION) from None

        user = self._users.get_by_id(session.user_id)
        if user is None:
            self._sessions.revoke(new_refresh_token, now=now)
            raise InvalidSessionError(_INVALID_SESSION)

        return self._envelope(user, refresh_token=new_refresh_token, now=now)

    def validate(self, access_token: str) -> str:
        """Resolve the acting user id from an access token without store access."""
        return self._codec.verify(access_token, now=self._clock()).user_id

    def current_user(self, access_token: str) -> dict[str, object]:
        """Return the public profile behind a valid access token."""
        user_id = self.validate(access_token)
        user = self._users.get_by_id(user_id)
        if user is None:
            raise InvalidSessionError("unknown user")
        return {"id": user.id, "email": user.email, "created_at": user.created_at}

    def logout(self, refresh_token: str) -> dict[str, bool]:
        """Revoke one refresh session idempotently."""
        self._sessions.revoke(refresh_token, now=self._clock())
        return {"ok": True}

    def purge_expired_sessions(self) -> int:
        """Delete expired sessions; correctness never depends on this."""
        purged = self._sessions.purge_expired(now=self._clock())
        if purged:
            logger.info("purged %d expired refresh sessions", purged)
        return purged

    def _handle_reuse(self, session: RefreshSession, *, now: datetime) -> None:
        revoked = self._sessions.revoke_lineage(session.lineage_id, now=now)
        logger.warning(
            "refresh token reuse detected user_id=%s lineage=%s revoked=%d",
            session.user_id,
            session.lineage_id,
            revoked,
        )
        raise InvalidSessionError(_INVALID_SESSION)

    def _issue(self, user: User) -> dict[str, object]:
        now = self._clock()
        refresh_token = self._sessions.create(user.id, now=now, expires_at=now + self._refresh_ttl)
        return self._envelope(user, refresh_token=refresh_token, now=now)

    def _envelope(self, user: User, *, refresh_token: str, now: datetime) -> dict[str, object]:
        return build_token_envelope(
            access_token=self._codec.issue(user.id, now=now),
            access_expires_in=self._codec.ttl_seconds,
            refresh_token=refresh_token,
            refresh_expires_in=int(self._refresh_ttl.total_seconds()),
            user_id=user.id,
            email=user.email,
        )
