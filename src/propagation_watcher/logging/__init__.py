"""Logging setup (structlog + Logfire)."""

from propagation_watcher.logging.config import configure_logging

__all__ = ["configure_logging"]
