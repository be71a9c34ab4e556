"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOGGER_NAME = "contact_discovery"


def configure_logging(verbose: bool = False) -> None:
    """Configure application logging once for CLI usage."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if not verbose:
        # selenium and webdriver-manager are chatty at INFO
        logging.getLogger("WDM").setLevel(logging.WARNING)
        logging.getLogger("selenium").setLevel(logging.WARNING)


def get_logger() -> logging.Logger:
    """Return the module logger used across the package."""
    return logging.getLogger(LOGGER_NAME)
