"""SQLite session store tests, including concurrent rotation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from datetime import timedelta
from datetime import timezone
import sqlite3
import threading

import pytest

from mealmind.auth.repository import SqliteSessionStore
from mealmind.auth.repository import SqliteUserStore
from mealmind.auth.schema import init_auth_schema
from mealmind.core.config import Settings
from mealmind.core.errors import ConflictError
from mealmind.core.errors import SessionConflictError
from mealmind.core.errors import StoreUnavailableError
from mealmind.core.refresh_tokens import hash_refresh_token

NOW = datetime(2026, 2, 14, 0, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


@pytest.fixture
def stores(sqlite_path: str) -> tuple[SqliteUserStore, SqliteSessionStore, str]:
    init_auth_schema(
        Settings(
            mealmind_jwt_secret="unit-test-secret-key-32-bytes-minimum",
            mealmind_sqlite_path=sqlite_path,
        )
    )
    users = SqliteUserStore(sqlite_path)
    user = users.create(email="a@x.com", password_hash="hash", created_at="2026-02-14T00:00:00Z")
    return users, SqliteSessionStore(sqlite_path), user.id


def test_user_store_rejects_duplicate_email(stores) -> None:
    users, _, user_id = stores

    with pytest.raises(ConflictError):
        users.create(email="a@x.com", password_hash="other", created_at="2026-02-14T00:00:00Z")

    assert users.get_by_email("a@x.com").id == user_id  # type: ignore[union-attr]
    assert users.get_by_id(user_id).email == "a@x.com"  # type: ignore[union-attr]
    assert users.get_by_email("b@x.com") is None


def test_rotate_persists_replacement_pointer(stores, sqlite_path: str) -> None:
    _, sessions, user_id = stores
    old_plain = sessions.create(user_id, now=NOW, expires_at=NOW + DAY)

    new_plain = sessions.rotate(old_plain, now=NOW + timedelta(seconds=1), new_expires_at=NOW + 2 * DAY)

    conn = sqlite3.connect(sqlite_path)
    try:
        rows = conn.execute(
            "SELECT id, lineage_id, replaced_by, revoked_at FROM refresh_sessions ORDER BY created_at, id"
        ).fetchall()
    finally:
        conn.close()
    by_id = {row[0]: row for row in rows}
    old_row = by_id[hash_refresh_token(old_plain)]
    new_row = by_id[hash_refresh_token(new_plain)]
    assert old_row[2] == new_row[0]
    assert new_row[1] == old_row[1] == old_row[0]
    assert new_row[2] is None and new_row[3] is None


def test_rotate_conflict_leaves_state_untouched(stores) -> None:
    _, sessions, user_id = stores
    plain = sessions.create(user_id, now=NOW, expires_at=NOW + DAY)
    sessions.revoke(plain, now=NOW)

    with pytest.raises(SessionConflictError):
        sessions.rotate(plain, now=NOW, new_expires_at=NOW + DAY)

    session = sessions.get(plain)
    assert session is not None
    assert session.revoked and session.replaced_by is None


def test_rotate_rejects_expired_session(stores) -> None:
    _, sessions, user_id = stores
    plain = sessions.create(user_id, now=NOW, expires_at=NOW + timedelta(minutes=1))

    with pytest.raises(SessionConflictError):
        sessions.rotate(plain, now=NOW + timedelta(minutes=1), new_expires_at=NOW + DAY)


def test_concurrent_rotation_has_exactly_one_winner(stores) -> None:
    _, sessions, user_id = stores
    plain = sessions.create(user_id, now=NOW, expires_at=NOW + DAY)
    workers = 6
    barrier = threading.Barrier(workers)

    def _rotate(_: int) -> str:
        barrier.wait()
        try:
            sessions.rotate(plain, now=NOW, new_expires_at=NOW + DAY)
            return "ok"
        except SessionConflictError:
            return "conflict"

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_rotate, range(workers)))

    assert results.count("ok") == 1
    assert results.count("conflict") == workers - 1
    session = sessions.get(plain)
    assert session is not None and session.replaced_by is not None


def test_revoke_lineage_and_purge(stores) -> None:
    _, sessions, user_id = stores
    first = sessions.create(user_id, now=NOW, expires_at=NOW + DAY)
    second = sessions.rotate(first, now=NOW, new_expires_at=NOW + DAY)
    other = sessions.create(user_id, now=NOW, expires_at=NOW + timedelta(minutes=5))

    lineage_id = sessions.get(second).lineage_id  # type: ignore[union-attr]
    assert sessions.revoke_lineage(lineage_id, now=NOW) == 2
    assert sessions.revoke_lineage(lineage_id, now=NOW) == 0
    assert sessions.get(other).is_active(NOW)  # type: ignore[union-attr]

    assert sessions.purge_expired(now=NOW + timedelta(minutes=5)) == 1
    assert sessions.get(other) is None
    assert sessions.get(first) is not None


def test_store_failure_surfaces_as_store_unavailable(tmp_path) -> None:
    sessions = SqliteSessionStore(str(tmp_path / "missing-dir" / "db.sqlite3"))

    with pytest.raises(StoreUnavailableError):
        sessions.get("any-token")


def test_purge_waits_for_whole_lineage_to_expire(stores) -> None:
    _, sessions, user_id = stores
    first = sessions.create(user_id, now=NOW, expires_at=NOW + DAY)
    second = sessions.rotate(first, now=NOW + DAY / 2, new_expires_at=NOW + 2 * DAY)

    assert sessions.purge_expired(now=NOW + DAY) == 0
    assert sessions.get(first) is not None

    assert sessions.purge_expired(now=NOW + 2 * DAY) == 2
    assert sessions.get(first) is None
    assert sessions.get(second) is None
