"""Background cleanup of expired refresh sessions."""

from __future__ import annotations

import asyncio
import logging

from mealmind.auth.service import AuthService
from mealmind.core.errors import StoreUnavailableError

logger = logging.getLogger("mealmind.auth.sessions")


async def sweep_once(service: AuthService) -> int:
    """Purge expired sessions off the event loop thread."""
    return await asyncio.to_thread(service.purge_expired_sessions)


async def run_session_sweeper(service: AuthService, *, interval_seconds: float) -> None:
    """Purge expired sessions every ``interval_seconds`` until cancelled.

    Expired sessions are already rejected at read time, so a failed sweep is
    logged and retried on the next tick.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweep_once(service)
        except StoreUnavailableError:
            logger.warning("session sweep skipped: store unavailable")
        except Exception:
            logger.exception("session sweep failed")
