"""Application settings for backend runtime and tests."""

from __future__ import annotations

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    mealmind_app_env: str = "dev"
    mealmind_app_host: str = "127.0.0.1"
    mealmind_app_port: int = Field(default=8000, ge=1)
    mealmind_log_level: str = "INFO"

    mealmind_jwt_secret: str = Field(min_length=32)
    mealmind_jwt_issuer: str = "mealmind"
    mealmind_jwt_audience: str = "mealmind-users"
    mealmind_access_token_ttl_minutes: int = Field(default=60, ge=1)
    mealmind_refresh_token_ttl_minutes: int = Field(default=20160, ge=1)
    mealmind_token_leeway_seconds: int = Field(default=5, ge=0)

    mealmind_password_min_length: int = Field(default=8, ge=1)
    mealmind_password_max_length: int = Field(default=256, ge=1)

    mealmind_sqlite_path: str = "mealmind.db"
    mealmind_session_sweep_interval_seconds: int = Field(default=600, ge=1)

    @model_validator(mode="after")
    def validate_token_lifetimes(self) -> "Settings":
        """Ensure refresh sessions outlive the access tokens they back."""
        if self.mealmind_refresh_token_ttl_minutes <= self.mealmind_access_token_ttl_minutes:
            raise ValueError(
                "MEALMIND_REFRESH_TOKEN_TTL_MINUTES must be greater than "
                "MEALMIND_ACCESS_TOKEN_TTL_MINUTES"
            )
        return self

    @model_validator(mode="after")
    def validate_password_bounds(self) -> "Settings":
        if self.mealmind_password_min_length > self.mealmind_password_max_length:
            raise ValueError(
                "MEALMIND_PASSWORD_MIN_LENGTH must not exceed MEALMIND_PASSWORD_MAX_LENGTH"
            )
        return self

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.mealmind_access_token_ttl_minutes * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.mealmind_refresh_token_ttl_minutes * 60


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
