"""
Run the backend with uvicorn.

Usage:
    python -m src.api

Host, port, storage backend and log level come from the environment (see settings.py).
"""
from __future__ import annotations

import logging

from .main import configure_logging
from .settings import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Starting backend on http://%s:%s (backend=%s)",
        settings.host,
        settings.port,
        settings.persistence_backend,
    )
    uvicorn.run(
        "src.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
