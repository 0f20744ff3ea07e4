"""Exceptions raised by the persistence queue."""

from __future__ import annotations

from propagation_watcher.exceptions.exceptions import WatcherError


class QueueError(WatcherError):
    """Base exception for queue operations."""


class QueueFull(QueueError):
    """Raised by a non-blocking put when the queue has reached its max size."""


class QueueEmpty(QueueError):
    """Raised by a non-blocking get on an empty queue."""


class QueueShutdown(QueueError):
    """Raised when putting to, or draining, a queue that has been shut down."""
