# -*- coding: utf-8 -*-
"""Transaction preparation: hashing, dedup claim, detail extraction."""

from propagation_watcher.services.preparation.signer import SignerRecovery, recover_signer
from propagation_watcher.services.preparation.transaction_preparer import (
    PreparedBatch,
    TransactionPreparer,
)

__all__ = [
    "PreparedBatch",
    "SignerRecovery",
    "TransactionPreparer",
    "recover_signer",
]
