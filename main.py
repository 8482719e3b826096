"""Serve the Tenantry API with uvicorn: ``python main.py``."""

import os

import uvicorn
from loguru import logger

from tenantry.core.config import get_settings
from tenantry.core.logging import UVICORN_LOGGERS, setup_logging

# dictConfig for uvicorn: its loggers write through Loguru like ours do
UVICORN_LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"default": {"class": "tenantry.core.logging.InterceptHandler"}},
    "loggers": {
        name: {"handlers": ["default"], "level": "INFO", "propagate": False}
        for name in UVICORN_LOGGERS
    },
}


def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    # Platforms such as Cloud Run and Heroku choose the port
    port = int(os.environ.get("PORT", settings.api_port))

    logger.info(
        "Listening on http://{}:{}{}",
        settings.api_host,
        port,
        " with auto-reload" if settings.debug else "",
    )
    uvicorn.run(
        "tenantry.api.main:app",
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=UVICORN_LOG_CONFIG,
    )


if __name__ == "__main__":
    main()
