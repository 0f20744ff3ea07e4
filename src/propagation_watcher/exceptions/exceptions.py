"""Custom exceptions for ingestion, storage and outbound HTTP."""

from __future__ import annotations


class WatcherError(Exception):
    """Base exception for propagation-watcher errors."""


class MissingRequiredConfigError(WatcherError):
    """Raised when a required configuration value is missing."""


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class StorageError(WatcherError):
    """Raised when a storage backend call fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class StorageUnavailableError(StorageError):
    """Raised when the storage backend cannot be reached (fatal at startup)."""


class StorageTimeoutError(StorageError):
    """Raised when a storage call exceeds its timeout.

    outcome_unknown is True when the call may still have committed.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        cause: BaseException | None = None,
        outcome_unknown: bool = False,
    ) -> None:
        super().__init__(message, operation=operation, cause=cause)
        self.outcome_unknown = outcome_unknown


# ---------------------------------------------------------------------------
# Recorders
# ---------------------------------------------------------------------------


class RecorderError(WatcherError):
    """Base for failures surfaced by a recorder call."""

    def __init__(self, message: str, *, peer_id: str | None = None) -> None:
        super().__init__(message)
        self.peer_id = peer_id


class PeerRegistrationError(RecorderError):
    """Raised when inserting the reporting peer fails."""


class BatchPersistError(RecorderError):
    """Raised when a batched insert (sightings, details) fails and the policy is 'raise'."""

    def __init__(self, message: str, *, peer_id: str | None = None, rows: int = 0) -> None:
        super().__init__(message, peer_id=peer_id)
        self.rows = rows


class SinglePersistError(RecorderError):
    """Raised when a single-row insert (block fetch) fails."""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class SignerRecoveryError(WatcherError):
    """Raised when the sender cannot be recovered from a transaction signature."""

    def __init__(self, message: str, *, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


# ---------------------------------------------------------------------------
# Outbound HTTP
# ---------------------------------------------------------------------------


class UpstreamAPIError(WatcherError):
    """Raised when an upstream HTTP request fails after retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimitError(UpstreamAPIError):
    """Raised when the API returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after
