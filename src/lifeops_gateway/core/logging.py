"""Logging setup for the gateway process."""

from __future__ import annotations

import logging
import sys

from lifeops_gateway.core.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stderr handler at the configured level."""
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    logging.basicConfig(level=resolved, handlers=[handler], force=True)
    # httpx logs every request line at INFO, which would include full provider URLs
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))
