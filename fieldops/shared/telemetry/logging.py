"""Logging configuration for the application.

Every record carries ``request_id`` (``-`` outside a request, e.g. in the
trigger dispatcher's workers), set by RequestIDMiddleware.
"""

import logging
import sys
from contextvars import ContextVar

from fieldops.core.config import get_settings

current_request_id: ContextVar[str] = ContextVar("current_request_id", default="-")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id.get()
        return True


def setup_logging() -> None:
    """Configure root logging to stdout.

    Level is DEBUG when settings.debug is True, otherwise settings.log_level.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler], force=True)
    # httpx logs every Firestore round-trip at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually ``__name__``)."""
    return logging.getLogger(name)
