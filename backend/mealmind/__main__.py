"""Run the API with uvicorn using configured host/port."""

from __future__ import annotations

import uvicorn

from mealmind.core.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "mealmind.main:app",
        host=settings.mealmind_app_host,
        port=settings.mealmind_app_port,
        log_level=settings.mealmind_log_level.lower(),
    )


if __name__ == "__main__":
    main()
