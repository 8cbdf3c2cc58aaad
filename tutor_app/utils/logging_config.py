"""Logging configuration helpers for the tutor application."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(level: int = logging.INFO) -> Logger:
    """Configure basic logging for the application and return its logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # Outgoing database requests are logged by the repository itself.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logging.getLogger("tutor_app")
