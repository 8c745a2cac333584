"""Pydantic models for auth requests."""

from __future__ import annotations

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    """POST /auth/register request body."""

    email: str
    password: str


class LoginRequest(BaseModel):
    """POST /auth/login request body."""

    email: str
    password: str


class RefreshRequest(BaseModel):
    """POST /auth/refresh request body."""

    refresh_token: str


class LogoutRequest(BaseModel):
    """POST /auth/logout request body."""

    refresh_token: str
