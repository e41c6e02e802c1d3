"""Logging setup for the app and CLI."""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the bridge's format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request URL at INFO, which includes query strings.
    logging.getLogger("httpx").setLevel(logging.WARNING)
