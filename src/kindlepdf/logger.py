"""Logging setup for the CLI"""

import logging


LOGGER_NAME = "kindlepdf"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbosity: int = 0, level: str = None) -> logging.Logger:
    """Configure the package logger; -v gives INFO, -vv DEBUG, else the explicit level (default WARNING)."""
    if verbosity >= 2:
        log_level = logging.DEBUG
    elif verbosity == 1:
        log_level = logging.INFO
    else:
        log_level = getattr(logging, (level or "WARNING").upper(), None)
        if not isinstance(log_level, int):
            raise ValueError(f"Invalid log level '{level}'")

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level)
    return logger
