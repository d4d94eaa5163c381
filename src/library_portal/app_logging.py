"""Logging setup for the portal client."""

import logging

PACKAGE_LOGGER = "library_portal"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Route package logs to stderr at ``level``.

    Accepts a level number or name ("debug", "WARNING"). Calling it again
    only changes the level; the package never gets a second handler.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
