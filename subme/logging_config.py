"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only installs
handlers for processes that run the package directly (the CLI).
"""

from __future__ import annotations

import logging
from logging.config import dictConfig

from subme.config import get_settings

_CONFIGURED = False


def setup_logging(level: str | None = None) -> None:
    """Configure console logging once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = (level or get_settings().log_level).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                "subme": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
                # httpx logs every request at INFO
                "httpx": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )

    logging.getLogger(__name__).debug(f"Logging configured at {level}")
    _CONFIGURED = True
