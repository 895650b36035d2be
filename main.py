"""Main entry point for running the User Management API."""

import os
import sys

import uvicorn
from loguru import logger

from src.api.main import app
from src.core.config import get_settings, load_database_config
from src.core.exceptions import ConfigurationError
from src.core.logging import setup_logging

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def build_uvicorn_log_config() -> dict[str, object]:
    """Route uvicorn's loggers through Loguru."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {"class": "src.core.logging.InterceptHandler"},
        },
        "loggers": {
            name: {"handlers": ["default"], "level": "INFO", "propagate": False}
            for name in UVICORN_LOGGERS
        },
    }


def main() -> None:
    """Validate the configuration and start the server.

    Exits with status 1 when the PostgreSQL backend is selected and a
    required ``DB_*`` variable is missing. A database that cannot be reached
    aborts the lifespan startup, and uvicorn then exits non-zero as well.
    """
    settings = get_settings()
    setup_logging(settings)

    if settings.uses_database:
        try:
            load_database_config()
        except ConfigurationError as exc:
            logger.critical("Cannot start: {}", exc.message)
            sys.exit(1)

    # Hosting platforms may assign the port through PORT
    port = int(os.environ.get("PORT", settings.api_port))

    if settings.debug:
        logger.info(
            f"Starting Uvicorn on http://{settings.api_host}:{port} "
            "(development mode with auto-reload)"
        )
        uvicorn.run(
            "src.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            lifespan="on",
            log_config=build_uvicorn_log_config(),
        )
    else:
        logger.info(f"Starting Uvicorn on http://{settings.api_host}:{port}")
        uvicorn.run(
            app,
            host=settings.api_host,
            port=port,
            reload=False,
            lifespan="on",
            log_config=build_uvicorn_log_config(),
        )


if __name__ == "__main__":
    main()
