"""ObservedTransaction: a signed transaction as delivered by a peer connection.

The node's dispatcher hands over the canonical signed encoding (raw) together
with the decoded fields it already parsed. The hash is always derived from raw.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_utils import keccak

from propagation_watcher.utils.validation import normalize_address

LEGACY_TX_TYPE = 0
DYNAMIC_FEE_TX_TYPE = 2


def _as_int(value: Any, default: int = 0) -> int:
    """Accept ints, 0x-hex strings and decimal strings."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    s = str(value).strip()
    if s.lower().startswith("0x"):
        return int(s, 16)
    return int(s)


@dataclass(frozen=True, slots=True)
class ObservedTransaction:
    """Signed transaction plus the fields needed for detail extraction.

    For legacy and access-list transactions gas_fee_cap and gas_tip_cap equal
    gas_price. For dynamic-fee transactions gas_price is the fee cap.
    """

    raw: bytes
    """Canonical signed encoding (typed envelope or legacy RLP)."""
    nonce: int
    gas: int
    """Gas limit."""
    gas_price: int
    gas_fee_cap: int
    gas_tip_cap: int
    to: str | None = None
    """Recipient address; None for contract creation."""
    chain_id: int | None = None
    tx_type: int = LEGACY_TX_TYPE

    @property
    def tx_hash(self) -> str:
        """0x-prefixed keccak256 of the canonical encoding."""
        return "0x" + keccak(self.raw).hex()

    @property
    def is_contract_creation(self) -> bool:
        return not self.to

    @classmethod
    def from_fields(cls, raw: bytes, fields: dict[str, Any]) -> ObservedTransaction:
        """Build from raw bytes and an eth-style transaction dict (camelCase keys).

        Recognized keys: type, chainId, nonce, gas, gasPrice, maxFeePerGas,
        maxPriorityFeePerGas, to. A fee-cap dict without a declared type is
        treated as dynamic-fee; a declared type (e.g. 3 for blob) is kept.
        """
        tx_type = _as_int(fields.get("type"), LEGACY_TX_TYPE)
        if tx_type >= DYNAMIC_FEE_TX_TYPE or "maxFeePerGas" in fields:
            fee_cap = _as_int(fields.get("maxFeePerGas"))
            tip_cap = _as_int(fields.get("maxPriorityFeePerGas"))
            gas_price = fee_cap
            tx_type = max(tx_type, DYNAMIC_FEE_TX_TYPE)
        else:
            gas_price = _as_int(fields.get("gasPrice"))
            fee_cap = gas_price
            tip_cap = gas_price
        to = fields.get("to")
        chain_id = fields.get("chainId")
        return cls(
            raw=bytes(raw),
            nonce=_as_int(fields.get("nonce")),
            gas=_as_int(fields.get("gas")),
            gas_price=gas_price,
            gas_fee_cap=fee_cap,
            gas_tip_cap=tip_cap,
            to=normalize_address(str(to)) if to else None,
            chain_id=_as_int(chain_id) if chain_id is not None else None,
            tx_type=tx_type,
        )
