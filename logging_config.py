"""Logging configuration for the API."""

import logging
import sys

from config import get_settings


def setup_logging() -> None:
    """Configure root logging to stdout; DEBUG when settings.debug is set."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
