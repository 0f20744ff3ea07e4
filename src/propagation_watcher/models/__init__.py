# -*- coding: utf-8 -*-
"""Domain models."""

from propagation_watcher.models.block import BlockFetchRecord, FetchedBlock
from propagation_watcher.models.sighting import Sighting
from propagation_watcher.models.transaction import ObservedTransaction
from propagation_watcher.models.tx_detail import (
    RECIPIENT_SENTINEL,
    SIGNER_SENTINEL,
    TxDetail,
)

__all__ = [
    "BlockFetchRecord",
    "FetchedBlock",
    "ObservedTransaction",
    "RECIPIENT_SENTINEL",
    "SIGNER_SENTINEL",
    "Sighting",
    "TxDetail",
]
