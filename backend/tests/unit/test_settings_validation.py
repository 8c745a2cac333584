"""Configuration guard tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mealmind.core.config import Settings

SECRET = "unit-test-secret-key-32-bytes-minimum"


def test_defaults_match_documented_lifetimes() -> None:
    settings = Settings(mealmind_jwt_secret=SECRET)

    assert settings.mealmind_access_token_ttl_minutes == 60
    assert settings.mealmind_refresh_token_ttl_minutes == 20160
    assert settings.access_token_ttl_seconds == 3600
    assert settings.refresh_token_ttl_seconds == 20160 * 60


@pytest.mark.parametrize(
    ("access_ttl", "refresh_ttl"),
    [
        (60, 60),
        (61, 60),
    ],
)
def test_refresh_ttl_must_exceed_access_ttl(access_ttl: int, refresh_ttl: int) -> None:
    """Input: refresh TTL <= access TTL -> Output: settings validation fails."""
    with pytest.raises(ValidationError):
        Settings(
            mealmind_jwt_secret=SECRET,
            mealmind_access_token_ttl_minutes=access_ttl,
            mealmind_refresh_token_ttl_minutes=refresh_ttl,
        )


def test_jwt_secret_requires_minimum_32_characters() -> None:
    with pytest.raises(ValidationError):
        Settings(mealmind_jwt_secret="1234567890123456789012345678901")


def test_jwt_secret_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEALMIND_JWT_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings()


def test_password_bounds_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        Settings(
            mealmind_jwt_secret=SECRET,
            mealmind_password_min_length=20,
            mealmind_password_max_length=10,
        )


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEALMIND_JWT_SECRET", SECRET)
    monkeypatch.setenv("MEALMIND_ACCESS_TOKEN_TTL_MINUTES", "15")

    settings = Settings()

    assert settings.mealmind_jwt_secret == SECRET
    assert settings.access_token_ttl_seconds == 900
