"""Logging configuration for the kidsmoney command line.

Library modules only create loggers (``logging.getLogger(__name__)``);
handlers are installed here, once, by the application shell.
"""

import logging
from typing import Optional

LOGGER_NAME = "kidsmoney"
LOG_LEVEL_ENV_VAR = "KIDSMONEY_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None, logger_name: str = LOGGER_NAME) -> logging.Logger:
    """Send the package's log records to stderr.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance

    Raises:
        ValueError: If level is not a known level name
    """
    level_name = (level or DEFAULT_LEVEL).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False

    return logger
