"""TxDetailRecorder: stores detail records and settles the matching cache claims."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from propagation_watcher.exceptions import BatchPersistError, StorageError
from propagation_watcher.services.recording.policy import (
    DETAIL_DEFAULT,
    PersistPolicy,
    run_with_policy,
)

if TYPE_CHECKING:
    from propagation_watcher.models.tx_detail import TxDetail
    from propagation_watcher.persistence.repositories.interfaces import (
        ISeenTxCache,
        ITxDetailRepository,
    )


class TxDetailRecorder:
    """Inserts details, then commits their hashes to the dedup cache.

    A hash only becomes "seen" once its detail row is stored. On failure the
    claims are released, so the next sighting of the hash extracts it again.
    """

    def __init__(
        self,
        detail_repository: ITxDetailRepository,
        seen_cache: ISeenTxCache,
        *,
        policy: PersistPolicy = DETAIL_DEFAULT,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._details = detail_repository
        self._cache = seen_cache
        self._policy = policy
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def record(
        self,
        details: Sequence[TxDetail],
        claimed_hashes: Sequence[str],
    ) -> bool:
        """Insert details; commit claimed_hashes on success, release them on failure.

        Returns:
            True if stored, False if dropped.

        Raises:
            BatchPersistError: The insert failed and the policy is 'raise'.
        """
        if not details:
            self._cache.commit(claimed_hashes)
            return True

        try:
            inserted = await run_with_policy(
                self._policy,
                lambda: self._details.insert_batch(details),
                on_retry=lambda attempt, e: self._logger.info(
                    "tx_detail_persist_retry",
                    attempt=attempt,
                    error_message=str(e),
                ),
            )
        except StorageError as e:
            self._cache.release(claimed_hashes)
            self._logger.warning(
                "tx_detail_batch_persist_failed",
                detail_count=len(details),
                released_count=len(claimed_hashes),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            if self._policy.raises:
                raise BatchPersistError(
                    f"detail batch insert failed: {e}", rows=len(details)
                ) from e
            return False
        except BaseException:
            self._cache.release(claimed_hashes)
            raise

        self._cache.commit(claimed_hashes)
        self._logger.debug(
            "tx_details_recorded",
            detail_count=len(details),
            inserted_count=inserted,
        )
        return True
