"""Logging configuration for the service process."""

from __future__ import annotations

import logging
from logging.config import dictConfig

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a console handler for the ``wallet_auth`` logger tree.

    Safe to call more than once; only the level is updated after the first call.
    """
    global _configured
    if _configured:
        logging.getLogger("wallet_auth").setLevel(level.upper())
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "wallet_auth": {
                    "handlers": ["console"],
                    "level": level.upper(),
                    "propagate": True,
                },
            },
        }
    )
    _configured = True
