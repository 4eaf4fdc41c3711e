"""Logging configuration shared by the API process and scripts."""

import logging
import sys

from app.core.config import get_settings


def setup_logging() -> None:
    """Configure the root logger once, level taken from settings."""
    settings = get_settings()
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logging.basicConfig(level=level, handlers=[handler], force=True)
