"""
fifachat - Logging
===================
Every fifachat logger hangs below one ``"fifachat"`` root logger that owns
the only stdout handler.  Module loggers propagate to it, so the API, the
retrieval pipeline, and the CLI share one line format and one level, and
uvicorn's access / error logs are rendered the same way by ``run()``.

Level resolution:
  • ``settings.LOG_LEVEL`` when set
  • otherwise ``settings.ENV``: ``"dev"`` → DEBUG, ``"prod"`` → WARNING

Usage:
    from fifachat.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("[CHAT] %d message(s) received", n)
"""

import logging
import sys
from typing import Any

from fifachat.config.settings import settings

ROOT_LOGGER_NAME = "fifachat"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_ENV_LEVELS = {"dev": logging.DEBUG, "prod": logging.WARNING}


def resolve_level() -> int:
    if settings.LOG_LEVEL is not None:
        return logging.getLevelName(settings.LOG_LEVEL)
    return _ENV_LEVELS.get(settings.ENV, logging.INFO)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        root.addHandler(handler)
        root.setLevel(resolve_level())
        root.propagate = False
    return root


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return a logger under the ``fifachat`` hierarchy.

    Names outside the package (``"__main__"`` when a script is run
    directly) are re-parented as ``fifachat.<name>``.  ``level`` narrows a
    single logger without touching the shared handler.
    """
    _root_logger()
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def uvicorn_log_config() -> dict[str, Any]:
    """``logging.config`` dict that makes uvicorn print in the fifachat format."""
    level = logging.getLevelName(resolve_level())
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"fifachat": {"format": LOG_FORMAT, "datefmt": LOG_DATEFMT}},
        "handlers": {"stdout": {"class": "logging.StreamHandler", "formatter": "fifachat", "stream": "ext://sys.stdout"}},
        "loggers": {
            "uvicorn": {"handlers": ["stdout"], "level": level, "propagate": False},
            "uvicorn.error": {"level": level},
            "uvicorn.access": {"handlers": ["stdout"], "level": level, "propagate": False},
        },
    }
