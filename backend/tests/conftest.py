"""Shared fixtures for auth core tests."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone
import importlib
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest

TEST_JWT_SECRET = "unit-test-secret-key-32-bytes-minimum"


class FrozenClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def register_payload() -> dict[str, Any]:
    """Default register/login payload used by API tests."""
    return {"email": "a@x.com", "password": "secret123"}


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 2, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sqlite_path(tmp_path: Path) -> str:
    return str(tmp_path / "mealmind.sqlite3")


@pytest.fixture
def app_main(sqlite_path: str, monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    """Fresh application module bound to a temporary SQLite database."""
    monkeypatch.setenv("MEALMIND_SQLITE_PATH", sqlite_path)
    monkeypatch.setenv("MEALMIND_JWT_SECRET", TEST_JWT_SECRET)

    import mealmind.main as main_module

    main_module = importlib.reload(main_module)
    main_module.startup()
    return main_module
