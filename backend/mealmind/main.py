"""FastAPI application entrypoint for the mealmind auth core."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

import mealmind.runtime as runtime
from mealmind.api.deps import me
from mealmind.api.routers.auth import login
from mealmind.api.routers.auth import logout
from mealmind.api.routers.auth import refresh
from mealmind.api.routers.auth import register
from mealmind.api.routers.auth import router as auth_router
from mealmind.api.routers.health import router as health_router
from mealmind.api.routers.me import me_route
from mealmind.api.routers.me import router as me_router
from mealmind.auth.http import handle_http_exception
from mealmind.auth.http import handle_request_validation_error
from mealmind.auth.models import LoginRequest
from mealmind.auth.models import LogoutRequest
from mealmind.auth.models import RefreshRequest
from mealmind.auth.models import RegisterRequest
from mealmind.auth.sweeper import run_session_sweeper

logger = logging.getLogger("mealmind.api")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def startup() -> None:
    """Load settings, ensure auth tables exist and wire the auth service."""
    runtime.startup()
    configure_logging(runtime.settings.mealmind_log_level)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    startup()
    logger.info("mealmind auth starting (env=%s)", runtime.settings.mealmind_app_env)
    sweeper = asyncio.create_task(
        run_session_sweeper(
            runtime.auth_service,
            interval_seconds=runtime.settings.mealmind_session_sweep_interval_seconds,
        )
    )
    try:
        yield
    finally:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        logger.info("mealmind auth stopped")


app = FastAPI(lifespan=lifespan)


@app.exception_handler(HTTPException)
async def handle_http_exception_route(request: Request, exc: HTTPException) -> JSONResponse:
    """Adapter used by FastAPI exception handling."""
    return await handle_http_exception(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_route(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await handle_request_validation_error(request, exc)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        ms,
    )
    return response


app.include_router(auth_router)
app.include_router(me_router)
app.include_router(health_router)


__all__ = [
    "LoginRequest",
    "LogoutRequest",
    "RefreshRequest",
    "RegisterRequest",
    "app",
    "handle_http_exception",
    "login",
    "logout",
    "me",
    "me_route",
    "refresh",
    "register",
    "startup",
]
