"""TransactionPreparer: turns a peer's transaction batch into sightings and detail records."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from propagation_watcher.exceptions import SignerRecoveryError
from propagation_watcher.models.sighting import Sighting
from propagation_watcher.models.transaction import ObservedTransaction
from propagation_watcher.models.tx_detail import (
    RECIPIENT_SENTINEL,
    SIGNER_SENTINEL,
    TxDetail,
)
from propagation_watcher.persistence.repositories.interfaces.seen_tx_cache import (
    ISeenTxCache,
)
from propagation_watcher.services.preparation.signer import SignerRecovery, recover_signer
from propagation_watcher.utils.clock import Clock, now_ms
from propagation_watcher.utils.validation import mask_peer_id, normalize_address


@dataclass(frozen=True)
class PreparedBatch:
    """Output of TransactionPreparer.prepare for one peer report."""

    peer_id: str
    sightings: list[Sighting] = field(default_factory=list)
    """One per input transaction, in input order."""
    details: list[TxDetail] = field(default_factory=list)
    """One per hash that was not yet seen (nor claimed) at processing time."""
    claimed_hashes: list[str] = field(default_factory=list)
    """Hashes this batch holds a cache claim for; must be committed or released."""

    @property
    def is_empty(self) -> bool:
        return not self.sightings


class TransactionPreparer:
    """Splits observed transactions into sightings (always) and details (new hashes only).

    The dedup check is cache.claim(), so two peers reporting the same new hash
    at the same time extract it once. Claimed hashes become "seen" when the
    detail recorder commits them, or immediately with mark_seen=True.
    """

    def __init__(
        self,
        seen_cache: ISeenTxCache,
        *,
        clock: Clock = now_ms,
        signer_recovery: SignerRecovery = recover_signer,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the preparer.

        Args:
            seen_cache: Dedup cache (injected).
            clock: Unix-ms clock, read once per transaction.
            signer_recovery: Sender recovery function (injected for tests).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._cache = seen_cache
        self._clock = clock
        self._recover_signer = signer_recovery
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def prepare(
        self,
        txs: Sequence[ObservedTransaction],
        peer_id: str,
        *,
        mark_seen: bool = False,
    ) -> PreparedBatch:
        """Build sightings and details for a batch reported by peer_id.

        Args:
            txs: Transactions in the order the peer delivered them.
            peer_id: Reporting peer.
            mark_seen: Commit new hashes to the cache right away instead of
                leaving them claimed until their details are stored.

        Returns:
            PreparedBatch; claimed_hashes is empty when mark_seen is True.
        """
        batch = PreparedBatch(peer_id=peer_id)
        with bound_contextvars(peer_id=mask_peer_id(peer_id)):
            for tx in txs:
                tx_hash = tx.tx_hash
                first_seen_ms = self._clock()
                batch.sightings.append(Sighting.create(tx_hash, peer_id, first_seen_ms))
                if not self._cache.claim(tx_hash):
                    continue
                try:
                    detail = self.extract_detail(tx, tx_hash, first_seen_ms)
                except BaseException:
                    self._cache.release([tx_hash])
                    raise
                batch.details.append(detail)
                if mark_seen:
                    self._cache.commit([tx_hash])
                else:
                    batch.claimed_hashes.append(tx_hash)

            self._logger.debug(
                "transactions_prepared",
                tx_count=len(batch.sightings),
                new_tx_count=len(batch.details),
            )
        return batch

    def extract_detail(
        self,
        tx: ObservedTransaction,
        tx_hash: str,
        first_seen_ms: int,
    ) -> TxDetail:
        """Decode fee, caps, nonce, receiver and signer. Signer failures use the sentinel."""
        try:
            signer = self._recover_signer(tx)
        except SignerRecoveryError as e:
            self._logger.warning(
                "signer_recovery_failed",
                tx_hash=tx_hash,
                tx_type=tx.tx_type,
                error_message=str(e),
            )
            signer = SIGNER_SENTINEL

        return TxDetail(
            tx_hash=tx_hash,
            # Python ints are unbounded, so the product is exact beyond 256 bits
            fee=str(tx.gas_price * tx.gas),
            gas_fee_cap=str(tx.gas_fee_cap),
            gas_tip_cap=str(tx.gas_tip_cap),
            first_seen_ms=first_seen_ms,
            receiver=normalize_address(tx.to) if tx.to else RECIPIENT_SENTINEL,
            signer=signer,
            nonce=str(tx.nonce),
        )
