"""Validation helpers for addresses and peer ids."""

from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address

MAX_PEER_ID_LENGTH = 256


def is_hex_address(addr: Any) -> bool:
    """Return True if addr is a 0x-prefixed 20-byte hex address (42 chars)."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if len(s) != 42 or not s.startswith("0x"):
        return False
    try:
        int(s[2:], 16)
        return True
    except ValueError:
        return False


def normalize_address(addr: str) -> str:
    """EIP-55 checksum a hex address; anything else is returned unchanged."""
    if not is_hex_address(addr):
        return addr
    return to_checksum_address(addr.strip())


def is_peer_id(x: Any) -> bool:
    """Return True if x is a usable peer id: non-empty, bounded, printable."""
    if not isinstance(x, str):
        return False
    s = x.strip()
    return 0 < len(s) <= MAX_PEER_ID_LENGTH and s.isprintable()


def mask_peer_id(peer_id: str | None) -> str:
    """Return a shortened peer id for logging (e.g. a1b2c3...f9e8)."""
    if not peer_id or len(peer_id) < 12:
        return peer_id or "***"
    return f"{peer_id[:6]}...{peer_id[-4:]}"
