"""Exceptions subpackage."""

from propagation_watcher.exceptions.exceptions import (
    BatchPersistError,
    MissingRequiredConfigError,
    PeerRegistrationError,
    RateLimitError,
    RecorderError,
    SignerRecoveryError,
    SinglePersistError,
    StorageError,
    StorageTimeoutError,
    StorageUnavailableError,
    UpstreamAPIError,
    WatcherError,
)
from propagation_watcher.exceptions.queue_exceptions import (
    QueueEmpty,
    QueueError,
    QueueFull,
    QueueShutdown,
)

__all__ = [
    "BatchPersistError",
    "MissingRequiredConfigError",
    "PeerRegistrationError",
    "RateLimitError",
    "RecorderError",
    "SignerRecoveryError",
    "SinglePersistError",
    "StorageError",
    "StorageTimeoutError",
    "StorageUnavailableError",
    "UpstreamAPIError",
    "WatcherError",
    "QueueEmpty",
    "QueueError",
    "QueueFull",
    "QueueShutdown",
]
