"""PersistPolicy: explicit retry-vs-drop-vs-raise behaviour per persistence kind."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from propagation_watcher.exceptions import StorageError, StorageTimeoutError

if TYPE_CHECKING:
    from propagation_watcher.config import FailurePolicyName, IngestionSettings

PersistKind = Literal["sighting", "detail", "block"]

MAX_BACKOFF_SECONDS = 4.0


@dataclass(frozen=True, slots=True)
class PersistPolicy:
    """How a recorder reacts to StorageError.

    max_attempts counts the first try. After the last attempt the failure is
    either dropped (logged, call returns normally) or raised to the caller.
    """

    max_attempts: int = 1
    backoff_seconds: float = 0.0
    on_failure: FailurePolicyName = "drop"

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")

    @property
    def raises(self) -> bool:
        return self.on_failure == "raise"

    def backoff_delay(self, attempt: int) -> float:
        """Exponential backoff for the given zero-based attempt, capped at 4 seconds."""
        if self.backoff_seconds <= 0:
            return 0.0
        return min(MAX_BACKOFF_SECONDS, self.backoff_seconds * (2**attempt))

    @classmethod
    def from_settings(cls, ingestion: IngestionSettings, kind: PersistKind) -> PersistPolicy:
        """Build the policy configured for one persistence kind."""
        if kind == "sighting":
            attempts, on_failure = ingestion.sighting_max_attempts, ingestion.sighting_failure_policy
        elif kind == "detail":
            attempts, on_failure = ingestion.detail_max_attempts, ingestion.detail_failure_policy
        else:
            attempts, on_failure = ingestion.block_max_attempts, ingestion.block_failure_policy
        return cls(
            max_attempts=attempts,
            backoff_seconds=ingestion.retry_backoff_seconds,
            on_failure=on_failure,
        )


SIGHTING_DEFAULT = PersistPolicy(max_attempts=1, on_failure="drop")
DETAIL_DEFAULT = PersistPolicy(max_attempts=2, backoff_seconds=0.25, on_failure="drop")
BLOCK_DEFAULT = PersistPolicy(max_attempts=1, on_failure="raise")


async def run_with_policy[R](
    policy: PersistPolicy,
    operation: Callable[[], Awaitable[R]],
    *,
    on_retry: Callable[[int, StorageError], None] | None = None,
) -> R:
    """Await operation() up to policy.max_attempts times, retrying only on StorageError.

    A StorageTimeoutError with outcome_unknown set is raised at once, unretried.

    Raises:
        StorageError: The last error once attempts are exhausted.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except StorageError as e:
            attempt += 1
            unknown = isinstance(e, StorageTimeoutError) and e.outcome_unknown
            if attempt >= policy.max_attempts or unknown:
                raise
            if on_retry is not None:
                on_retry(attempt, e)
            delay = policy.backoff_delay(attempt - 1)
            if delay > 0:
                await asyncio.sleep(delay)
