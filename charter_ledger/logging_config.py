"""
Logging setup.

Every module logs through logging.getLogger(__name__), so all
records land under the "charter_ledger" logger configured here.
"""

import logging

from charter_ledger.config import get_settings

LOGGER_NAME = "charter_ledger"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Safe to call more than once: an existing handler is reused
    and only the level is updated.
    """
    settings = get_settings()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level or settings.LOG_LEVEL)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
