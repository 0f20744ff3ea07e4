"""SightingRecorder: one peer registration plus one batched, idempotent sighting insert."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from propagation_watcher.exceptions import (
    BatchPersistError,
    PeerRegistrationError,
    StorageError,
)
from propagation_watcher.services.recording.policy import (
    SIGHTING_DEFAULT,
    PersistPolicy,
    run_with_policy,
)
from propagation_watcher.utils.validation import mask_peer_id

if TYPE_CHECKING:
    from propagation_watcher.models.sighting import Sighting
    from propagation_watcher.persistence.repositories.interfaces import (
        IPeerRepository,
        ISightingRepository,
    )


class SightingRecorder:
    """Persists the sightings of one peer report.

    Losing a batch is tolerated (at-least-once upstream, duplicates dropped by
    the storage uniqueness key), so the default policy logs and returns False.
    """

    def __init__(
        self,
        peer_repository: IPeerRepository,
        sighting_repository: ISightingRepository,
        *,
        policy: PersistPolicy = SIGHTING_DEFAULT,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the recorder.

        Args:
            peer_repository: Peer registry (injected).
            sighting_repository: Sighting storage (injected).
            policy: Failure policy; default drops after one attempt.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._peers = peer_repository
        self._sightings = sighting_repository
        self._policy = policy
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def policy(self) -> PersistPolicy:
        return self._policy

    async def record(self, sightings: Sequence[Sighting], peer_id: str) -> bool:
        """Register peer_id, then insert all sightings in one batch.

        Returns:
            True if the batch was stored (duplicates included), False if it was dropped.

        Raises:
            PeerRegistrationError: Registration failed and the policy is 'raise'.
            BatchPersistError: The insert failed and the policy is 'raise'.
        """
        if not sightings:
            return True

        with bound_contextvars(peer_id=mask_peer_id(peer_id), sighting_count=len(sightings)):
            try:
                await run_with_policy(
                    self._policy,
                    lambda: self._peers.register(peer_id),
                    on_retry=self._log_retry("register_peer"),
                )
            except StorageError as e:
                self._logger.warning(
                    "sighting_peer_registration_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if self._policy.raises:
                    raise PeerRegistrationError(
                        f"peer registration failed: {e}", peer_id=peer_id
                    ) from e
                return False

            try:
                inserted = await run_with_policy(
                    self._policy,
                    lambda: self._sightings.insert_batch(sightings),
                    on_retry=self._log_retry("insert_sightings"),
                )
            except StorageError as e:
                self._logger.warning(
                    "sighting_batch_persist_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if self._policy.raises:
                    raise BatchPersistError(
                        f"sighting batch insert failed: {e}",
                        peer_id=peer_id,
                        rows=len(sightings),
                    ) from e
                return False

            self._logger.debug(
                "sightings_recorded",
                inserted_count=inserted,
                duplicate_count=len(sightings) - inserted,
            )
            return True

    def _log_retry(self, operation: str) -> Callable[[int, StorageError], None]:
        def _on_retry(attempt: int, error: StorageError) -> None:
            self._logger.info(
                "sighting_persist_retry",
                operation=operation,
                attempt=attempt,
                error_message=str(error),
            )

        return _on_retry
