"""BlockFetchRecorder: one peer registration plus one block-fetch row per call."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from propagation_watcher.exceptions import (
    PeerRegistrationError,
    SinglePersistError,
    StorageError,
)
from propagation_watcher.models.block import BlockFetchRecord
from propagation_watcher.services.recording.policy import (
    BLOCK_DEFAULT,
    PersistPolicy,
    run_with_policy,
)
from propagation_watcher.utils.clock import Clock, now_ms
from propagation_watcher.utils.validation import mask_peer_id

if TYPE_CHECKING:
    from propagation_watcher.models.block import FetchedBlock
    from propagation_watcher.persistence.repositories.interfaces import (
        IBlockFetchRepository,
        IPeerRepository,
    )


class BlockFetchRecorder:
    """Persists one block-observation event. Failures reach the caller by default."""

    def __init__(
        self,
        peer_repository: IPeerRepository,
        block_fetch_repository: IBlockFetchRepository,
        *,
        policy: PersistPolicy = BLOCK_DEFAULT,
        clock: Clock = now_ms,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._peers = peer_repository
        self._blocks = block_fetch_repository
        self._policy = policy
        self._clock = clock
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def record(
        self,
        block: FetchedBlock,
        peer_id: str,
        peer_remote_addr: str,
        peer_local_addr: str,
    ) -> BlockFetchRecord | None:
        """Register peer_id and insert the block-fetch row stamped with the current time.

        Returns:
            The stored record, or None if the policy is 'drop' and storage failed.

        Raises:
            PeerRegistrationError: Registration failed (policy 'raise').
            SinglePersistError: The insert failed (policy 'raise').
        """
        with bound_contextvars(
            peer_id=mask_peer_id(peer_id),
            block_number=block.number,
            block_hash=block.hash,
        ):
            try:
                await run_with_policy(self._policy, lambda: self._peers.register(peer_id))
            except StorageError as e:
                self._logger.warning(
                    "block_peer_registration_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if self._policy.raises:
                    raise PeerRegistrationError(
                        f"peer registration failed: {e}", peer_id=peer_id
                    ) from e
                return None

            record = BlockFetchRecord(
                block_hash=block.hash,
                block_number=block.number,
                first_seen_ms=self._clock(),
                peer_id=peer_id,
                peer_remote_addr=peer_remote_addr,
                peer_local_addr=peer_local_addr,
            )
            try:
                await run_with_policy(self._policy, lambda: self._blocks.insert(record))
            except StorageError as e:
                self._logger.warning(
                    "block_fetch_persist_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if self._policy.raises:
                    raise SinglePersistError(
                        f"block fetch insert failed: {e}", peer_id=peer_id
                    ) from e
                return None

            self._logger.info("block_fetch_recorded")
            return record
