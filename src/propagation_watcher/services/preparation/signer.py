"""Sender recovery from a signed transaction's signature."""

from __future__ import annotations

from collections.abc import Callable

from eth_account import Account

from propagation_watcher.exceptions import SignerRecoveryError
from propagation_watcher.models.transaction import ObservedTransaction

SignerRecovery = Callable[[ObservedTransaction], str]


def recover_signer(tx: ObservedTransaction) -> str:
    """Return the checksummed sender of tx.

    eth-account picks the signing scheme from the encoding itself: legacy
    (pre- and post-EIP-155), EIP-2930 and EIP-1559 envelopes, i.e. the rules of
    a London-era signer.

    Raises:
        SignerRecoveryError: If the encoding or signature cannot be decoded.
    """
    try:
        return Account.recover_transaction(tx.raw)
    except Exception as e:  # decoding errors surface as several unrelated types
        raise SignerRecoveryError(
            f"cannot recover sender: {type(e).__name__}: {e}",
            tx_hash=tx.tx_hash,
        ) from e
