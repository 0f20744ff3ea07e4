"""TxDetail: decoded fee/nonce/signer/recipient data, computed once per hash."""

from __future__ import annotations

from dataclasses import dataclass

RECIPIENT_SENTINEL = "0x0"
"""Receiver stored for contract-creation transactions."""

SIGNER_SENTINEL = "0x0000000000000000000000000000000000438308"
"""Signer stored when signature recovery fails."""


@dataclass(frozen=True, slots=True)
class TxDetail:
    """Detail record for a newly seen transaction. Numeric fields are decimal strings."""

    tx_hash: str
    fee: str
    """gas_price * gas, exact."""
    gas_fee_cap: str
    gas_tip_cap: str
    first_seen_ms: int
    receiver: str
    signer: str
    nonce: str
