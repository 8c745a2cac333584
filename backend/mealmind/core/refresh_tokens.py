"""Refresh session records, the session store contract, and an in-memory store."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import replace
from datetime import datetime
import hashlib
import secrets
import threading
from typing import Protocol

from mealmind.core.errors import SessionConflictError

REFRESH_TOKEN_BYTES = 32


def generate_refresh_token() -> str:
    """Return a new opaque, unguessable refresh token string."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_refresh_token(plain_token: str) -> str:
    """Derive the stored session id from a plaintext refresh token."""
    return hashlib.sha256(plain_token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class RefreshSession:
    """Stored refresh session metadata.

    ``id`` is the SHA-256 of the token handed to the client; the plaintext is
    never stored. ``lineage_id`` is the id of the first session of the chain
    started by one login, shared by every rotation descendant.
    """

    id: str
    user_id: str
    lineage_id: str
    expires_at: datetime
    created_at: datetime
    revoked_at: datetime | None = None
    replaced_by: str | None = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def rotated(self) -> bool:
        return self.replaced_by is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and not self.rotated and not self.is_expired(now)


class SessionStore(Protocol):
    """Persistence contract for refresh sessions.

    ``rotate`` must be atomic: it either marks the old session replaced and
    creates its successor, or changes nothing and raises
    :class:`SessionConflictError`. Of several concurrent rotations of the same
    session at most one succeeds.
    """

    def create(
        self,
        user_id: str,
        *,
        now: datetime,
        expires_at: datetime,
        lineage_id: str | None = None,
    ) -> str:
        """Persist a new active session and return its plaintext token."""
        ...

    def get(self, plain_token: str) -> RefreshSession | None:
        """Return the session for ``plain_token`` or ``None``."""
        ...

    def revoke(self, plain_token: str, *, now: datetime) -> None:
        """Revoke one session. Revoking a terminal or unknown session is a no-op."""
        ...

    def rotate(self, plain_token: str, *, now: datetime, new_expires_at: datetime) -> str:
        """Atomically replace an active session with a new one in the same lineage."""
        ...

    def revoke_lineage(self, lineage_id: str, *, now: datetime) -> int:
        """Revoke every not-yet-revoked session of a lineage."""
        ...

    def purge_expired(self, *, now: datetime) -> int:
        """Delete sessions whose expiry has passed."""
        ...


class InMemorySessionStore:
    """Thread-safe in-memory session store used by unit tests."""

    def __init__(self) -> None:
        self._records: dict[str, RefreshSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        user_id: str,
        *,
        now: datetime,
        expires_at: datetime,
        lineage_id: str | None = None,
    ) -> str:
        plain = generate_refresh_token()
        with self._lock:
            self._insert(plain, user_id=user_id, now=now, expires_at=expires_at, lineage_id=lineage_id)
        return plain

    def get(self, plain_token: str) -> RefreshSession | None:
        with self._lock:
            return self._records.get(hash_refresh_token(plain_token))

    def revoke(self, plain_token: str, *, now: datetime) -> None:
        session_id = hash_refresh_token(plain_token)
        with self._lock:
            record = self._records.get(session_id)
            if record is None or record.revoked:
                return
            self._records[session_id] = replace(record, revoked_at=now)

    def rotate(self, plain_token: str, *, now: datetime, new_expires_at: datetime) -> str:
        session_id = hash_refresh_token(plain_token)
        new_plain = generate_refresh_token()
        with self._lock:
            record = self._records.get(session_id)
            if record is None or not record.is_active(now):
                raise SessionConflictError("refresh session is not active")
            new_record = self._insert(
                new_plain,
                user_id=record.user_id,
                now=now,
                expires_at=new_expires_at,
                lineage_id=record.lineage_id,
            )
            self._records[session_id] = replace(record, replaced_by=new_record.id)
        return new_plain

    def revoke_lineage(self, lineage_id: str, *, now: datetime) -> int:
        with self._lock:
            targets = [
                record
                for record in self._records.values()
                if record.lineage_id == lineage_id and not record.revoked
            ]
            for record in targets:
                self._records[record.id] = replace(record, revoked_at=now)
        return len(targets)

    def purge_expired(self, *, now: datetime) -> int:
        with self._lock:
            live_lineages = {
                record.lineage_id for record in self._records.values() if not record.is_expired(now)
            }
            expired = [
                session_id
                for session_id, record in self._records.items()
                if record.is_expired(now) and record.lineage_id not in live_lineages
            ]
            for session_id in expired:
                del self._records[session_id]
        return len(expired)

    def _insert(
        self,
        plain_token: str,
        *,
        user_id: str,
        now: datetime,
        expires_at: datetime,
        lineage_id: str | None,
    ) -> RefreshSession:
        session_id = hash_refresh_token(plain_token)
        record = RefreshSession(
            id=session_id,
            user_id=user_id,
            lineage_id=lineage_id or session_id,
            expires_at=expires_at,
            created_at=now,
        )
        self._records[session_id] = record
        return record
