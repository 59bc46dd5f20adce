"""Logging configuration for the engagement service."""

import logging
import logging.config
from typing import Any

from engagement_service.core.config import settings

LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "engagement": {"level": settings.LOG_LEVEL, "propagate": True},
        "engagement_service": {"level": settings.LOG_LEVEL, "propagate": True},
        "sqlalchemy.engine": {"level": "INFO" if settings.DEBUG else "WARNING", "propagate": True},
    },
    "root": {"handlers": ["console"], "level": settings.LOG_LEVEL},
}


def configure_logging() -> None:
    """Apply the logging configuration. Safe to call more than once."""
    logging.config.dictConfig(LOGGING_CONFIG)
