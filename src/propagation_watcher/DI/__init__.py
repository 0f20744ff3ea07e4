"""Dependency injection."""

from propagation_watcher.DI.container import Container

__all__ = ["Container"]
