"""SQLite-backed credential and refresh-session stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import sqlite3
from typing import Protocol
import uuid

from mealmind.auth.session import from_utc_iso
from mealmind.auth.session import to_utc_iso
from mealmind.core.db import sqlite_connection
from mealmind.core.errors import ConflictError
from mealmind.core.errors import SessionConflictError
from mealmind.core.refresh_tokens import RefreshSession
from mealmind.core.refresh_tokens import generate_refresh_token
from mealmind.core.refresh_tokens import hash_refresh_token

logger = logging.getLogger("mealmind.auth.sessions")

_SESSION_COLUMNS = "id, user_id, lineage_id, expires_at, created_at, revoked_at, replaced_by"


@dataclass(frozen=True, slots=True)
class User:
    """Stored user identity."""

    id: str
    email: str
    password_hash: str
    created_at: str


class UserStore(Protocol):
    """Persistence contract for user identities."""

    def create(self, *, email: str, password_hash: str, created_at: str) -> User:
        """Insert a user; raise :class:`ConflictError` if the email exists."""
        ...

    def get_by_email(self, email: str) -> User | None:
        ...

    def get_by_id(self, user_id: str) -> User | None:
        ...


def _user_from_row(row: tuple) -> User:
    user_id, email, password_hash, created_at = row
    return User(id=str(user_id), email=str(email), password_hash=str(password_hash), created_at=str(created_at))


def _session_from_row(row: tuple) -> RefreshSession:
    session_id, user_id, lineage_id, expires_at, created_at, revoked_at, replaced_by = row
    return RefreshSession(
        id=str(session_id),
        user_id=str(user_id),
        lineage_id=str(lineage_id),
        expires_at=from_utc_iso(str(expires_at)),
        created_at=from_utc_iso(str(created_at)),
        revoked_at=from_utc_iso(str(revoked_at)) if revoked_at is not None else None,
        replaced_by=str(replaced_by) if replaced_by is not None else None,
    )


class SqliteUserStore:
    """Credential store over the ``users`` table."""

    def __init__(self, sqlite_path: str) -> None:
        self._path = sqlite_path

    def create(self, *, email: str, password_hash: str, created_at: str) -> User:
        user = User(id=str(uuid.uuid4()), email=email, password_hash=password_hash, created_at=created_at)
        try:
            with sqlite_connection(self._path) as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user.id, user.email, user.password_hash, user.created_at),
                )
                conn.commit()
        except sqlite3.IntegrityError as exc:
            raise ConflictError("email already registered") from exc
        return user

    def get_by_email(self, email: str) -> User | None:
        with sqlite_connection(self._path) as conn:
            row = conn.execute(
                """
                SELECT id, email, password_hash, created_at
                FROM users
                WHERE email = ?
                """,
                (email,),
            ).fetchone()
        return _user_from_row(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        with sqlite_connection(self._path) as conn:
            row = conn.execute(
                """
                SELECT id, email, password_hash, created_at
                FROM users
                WHERE id = ?
                """,
                (user_id,),
            ).fetchone()
        return _user_from_row(row) if row is not None else None


class SqliteSessionStore:
    """Refresh-session store over the ``refresh_sessions`` table.

    Each call opens its own connection. ``rotate`` takes the database write
    lock up front (``BEGIN IMMEDIATE``) and only replaces a row that is still
    active, so two concurrent rotations of one session cannot both commit.
    """

    def __init__(self, sqlite_path: str) -> None:
        self._path = sqlite_path

    def create(
        self,
        user_id: str,
        *,
        now: datetime,
        expires_at: datetime,
        lineage_id: str | None = None,
    ) -> str:
        plain = generate_refresh_token()
        session_id = hash_refresh_token(plain)
        with sqlite_connection(self._path) as conn:
            self._insert(
                conn,
                session_id=session_id,
                user_id=user_id,
                lineage_id=lineage_id or session_id,
                now=now,
                expires_at=expires_at,
            )
            conn.commit()
        return plain

    def get(self, plain_token: str) -> RefreshSession | None:
        with sqlite_connection(self._path) as conn:
            row = conn.execute(
                f"SELECT {_SESSION_COLUMNS} FROM refresh_sessions WHERE id = ?",
                (hash_refresh_token(plain_token),),
            ).fetchone()
        return _session_from_row(row) if row is not None else None

    def revoke(self, plain_token: str, *, now: datetime) -> None:
        with sqlite_connection(self._path) as conn:
            conn.execute(
                """
                UPDATE refresh_sessions
                SET revoked_at = COALESCE(revoked_at, ?)
                WHERE id = ?
                """,
                (to_utc_iso(now), hash_refresh_token(plain_token)),
            )
            conn.commit()

    def rotate(self, plain_token: str, *, now: datetime, new_expires_at: datetime) -> str:
        old_id = hash_refresh_token(plain_token)
        new_plain = generate_refresh_token()
        new_id = hash_refresh_token(new_plain)
        now_iso = to_utc_iso(now)

        with sqlite_connection(self._path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                """
                SELECT user_id, lineage_id
                FROM refresh_sessions
                WHERE id = ? AND revoked_at IS NULL AND replaced_by IS NULL AND expires_at > ?
                """,
                (old_id, now_iso),
            ).fetchone()
            if row is None:
                raise SessionConflictError("refresh session is not active")

            user_id, lineage_id = row
            self._insert(
                conn,
                session_id=new_id,
                user_id=str(user_id),
                lineage_id=str(lineage_id),
                now=now,
                expires_at=new_expires_at,
            )
            cursor = conn.execute(
                """
                UPDATE refresh_sessions
                SET replaced_by = ?
                WHERE id = ? AND revoked_at IS NULL AND replaced_by IS NULL
                """,
                (new_id, old_id),
            )
            if cursor.rowcount != 1:
                raise SessionConflictError("refresh session is not active")
            conn.commit()

        logger.debug("refresh session rotated lineage=%s", lineage_id)
        return new_plain

    def revoke_lineage(self, lineage_id: str, *, now: datetime) -> int:
        with sqlite_connection(self._path) as conn:
            cursor = conn.execute(
                """
                UPDATE refresh_sessions
                SET revoked_at = ?
                WHERE lineage_id = ? AND revoked_at IS NULL
                """,
                (to_utc_iso(now), lineage_id),
            )
            conn.commit()
            return int(cursor.rowcount)

    def purge_expired(self, *, now: datetime) -> int:
        with sqlite_connection(self._path) as conn:
            # Expired rows stay while their lineage still has an unexpired session.
            cursor = conn.execute(
                """
                DELETE FROM refresh_sessions
                WHERE expires_at <= ?
                  AND lineage_id NOT IN (
                      SELECT lineage_id FROM refresh_sessions WHERE expires_at > ?
                  )
                """,
                (to_utc_iso(now), to_utc_iso(now)),
            )
            conn.commit()
            return int(cursor.rowcount)

    @staticmethod
    def _insert(
        conn: sqlite3.Connection,
        *,
        session_id: str,
        user_id: str,
        lineage_id: str,
        now: datetime,
        expires_at: datetime,
    ) -> None:
        conn.execute(
            """
            INSERT INTO refresh_sessions
                (id, user_id, lineage_id, expires_at, created_at, revoked_at, replaced_by)
            VALUES (?, ?, ?, ?, ?, NULL, NULL)
            """,
            (session_id, user_id, lineage_id, to_utc_iso(expires_at), to_utc_iso(now)),
        )
