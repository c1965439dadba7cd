"""Process-wide logging setup.

LoggingConfig() is called once at startup (create_app). Modules either use
logging.getLogger(__name__) or get_logger() for a logger under the app
namespace.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from eventchat.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
ROOT_LOGGER_NAME = "eventchat"

# Chatty third-party loggers that drown out request logs at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "google.auth")


class LoggingConfig:
    _configured = False

    def __init__(self, level: Optional[str] = None) -> None:
        if LoggingConfig._configured:
            return
        settings = get_settings()
        level_name = (level or settings.log_level or "INFO").upper()

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(level_name)

        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        LoggingConfig._configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the eventchat namespace."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
