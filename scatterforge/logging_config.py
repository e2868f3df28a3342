"""Logging configuration for scatterforge command-line tools."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", name: Optional[str] = "scatterforge") -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Library modules only create loggers; handlers are installed here, by
    the application. Calling this again replaces the handler instead of
    stacking a second one.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        name: Logger to configure

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        if getattr(handler, '_scatterforge', False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler._scatterforge = True
    logger.addHandler(console_handler)

    return logger
