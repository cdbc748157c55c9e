# opsadmin/adapters/configuration/logging_config.py

"""
Logging setup for the application.

A single named logger is built from the settings and handed to the
components that need it, instead of configuring the root logger.
"""

import logging

from opsadmin.adapters.configuration.config import Settings

LOGGER_NAME = "opsadmin"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Build the application logger.

    Args:
        settings: Application settings (LOG_LEVEL / DEBUG)

    Returns:
        The configured ``opsadmin`` logger
    """
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # create_app may run several times in one process (tests)
    if not any(getattr(h, "_opsadmin_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._opsadmin_handler = True
        logger.addHandler(handler)

    return logger
