"""
Logging for the ``portfolio`` package.

Everything under ``portfolio.*`` logs to stdout through one handler attached to
the package logger; the level comes from ``LOG_LEVEL`` and ``create_app``
overrides it with the app config. Other libraries keep their own settings.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "portfolio"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_configured = False


def _init_logging() -> None:
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    package_logger.addHandler(handler)
    _configured = True


def set_level(level: str) -> None:
    """Change the level of every `portfolio.*` logger."""
    _init_logging()
    logging.getLogger(PACKAGE_LOGGER).setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` (normally the caller's ``__name__``), below the package handler."""
    _init_logging()
    return logging.getLogger(name)
