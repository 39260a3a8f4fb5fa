from __future__ import annotations

import logging.config
import sys
from typing import Any

from backend.core.settings import Settings


def setup_logging(settings: Settings) -> None:
    """Configure console (and optionally rotating file) logging.

    The file handler is only attached when ``LOG_FILE`` is set, so test runs
    and containers that log to stdout do not leave files behind.
    """

    level = settings.log_level
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "level": level,
            "formatter": "default",
        },
    }
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(settings.log_file),
            "maxBytes": settings.log_max_bytes,
            "backupCount": settings.log_backups,
            "encoding": "utf-8",
            "level": "DEBUG",
            "formatter": "default",
        }
    names = list(handlers)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "uvicorn.error": {"handlers": names, "level": level, "propagate": False},
            "uvicorn.access": {"handlers": names, "level": level, "propagate": False},
        },
        "root": {"handlers": names, "level": level},
    }
    logging.config.dictConfig(config)
