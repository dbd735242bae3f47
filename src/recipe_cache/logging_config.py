"""Logging configuration.

Usage:
    ```python
    import logging

    logger = logging.getLogger(__name__)
    logger.info("Cache hit: %s", meal)
    ```

``setup_logging()`` is called once from the API lifespan; calling it again
is harmless.
"""

import logging
import logging.config

from recipe_cache.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "recipe_cache": {
            "handlers": ["console"],
            "level": settings.log_level.upper(),
            "propagate": False,
        },
    },
}


def setup_logging() -> None:
    """Initialize logging configuration from LOGGING_CONFIG."""
    logging.config.dictConfig(LOGGING_CONFIG)
