from __future__ import annotations

import logging

from cardvault_backend.config import config


LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_level(level: str | None = None) -> int:
    """Map a level name to its value; unknown names and ``None`` use ``LOG_LEVEL``."""
    for name in (level, config.log_level):
        if name and name.upper() in LEVELS:
            return LEVELS[name.upper()]
    return logging.INFO


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT, datefmt=DATE_FORMAT)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
