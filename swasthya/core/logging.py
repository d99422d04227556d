"""Application logger shared by every module."""

import logging
import sys

from swasthya.config import settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Driver chatter drowns booking logs at DEBUG
NOISY_LOGGERS = ("pymongo", "motor", "aiosmtplib", "passlib")


def setup_logging() -> logging.Logger:
    """Configure the ``swasthya`` logger from LOG_LEVEL and return it."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    app_logger = logging.getLogger("swasthya")
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Importing twice must not double every line
    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        app_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    app_logger.debug(f"Logging configured ({settings.ENVIRONMENT}, level {logging.getLevelName(level)})")
    return app_logger


logger = setup_logging()
