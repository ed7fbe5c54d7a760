"""Logging configuration for the tinyhttp process."""

import logging


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO") -> int:
    """
    Configure root logging and the ``tinyhttp`` logger.

    Unknown level names fall back to INFO.

    Returns:
        The numeric level applied.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    logging.getLogger("tinyhttp").setLevel(level)
    return level
