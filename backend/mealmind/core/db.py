"""SQLite connection helpers for backend persistence."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
import sqlite3

from mealmind.core.errors import StoreUnavailableError

logger = logging.getLogger("mealmind.db")


def create_sqlite_connection(path: str) -> sqlite3.Connection:
    """Create a SQLite connection with foreign key enforcement enabled."""
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def sqlite_connection(path: str) -> Iterator[sqlite3.Connection]:
    """Yield a fresh connection, rolling back on error and translating store failures.

    Integrity errors propagate unchanged so callers can map constraint
    violations (duplicate email) to domain errors. Every other ``sqlite3``
    failure becomes :class:`StoreUnavailableError`.
    """
    try:
        conn = create_sqlite_connection(path)
    except sqlite3.Error as exc:
        logger.exception("sqlite connect failed")
        raise StoreUnavailableError("store unavailable") from exc

    try:
        yield conn
    except sqlite3.IntegrityError:
        conn.rollback()
        raise
    except sqlite3.Error as exc:
        conn.rollback()
        logger.exception("sqlite operation failed")
        raise StoreUnavailableError("store unavailable") from exc
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()
