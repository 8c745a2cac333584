"""Schema bootstrap for auth tables."""

from __future__ import annotations

from mealmind.core.config import Settings
from mealmind.core.db import sqlite_connection


CREATE_AUTH_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS refresh_sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    lineage_id TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    created_at TEXT NOT NULL,
    revoked_at TEXT NULL,
    replaced_by TEXT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id)
);

CREATE INDEX IF NOT EXISTS idx_refresh_sessions_user_id ON refresh_sessions(user_id);
CREATE INDEX IF NOT EXISTS idx_refresh_sessions_lineage_id ON refresh_sessions(lineage_id);
CREATE INDEX IF NOT EXISTS idx_refresh_sessions_expires_at ON refresh_sessions(expires_at);
"""


def init_auth_schema(settings: Settings) -> None:
    """Ensure auth tables/indexes exist."""
    with sqlite_connection(settings.mealmind_sqlite_path) as conn:
        conn.executescript(CREATE_AUTH_SCHEMA_SQL)
        conn.commit()
