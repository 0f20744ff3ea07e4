# -*- coding: utf-8 -*-
"""Utility modules."""

from propagation_watcher.utils.clock import Clock, now_ms
from propagation_watcher.utils.validation import (
    is_hex_address,
    is_peer_id,
    mask_peer_id,
    normalize_address,
)

__all__ = [
    "Clock",
    "is_hex_address",
    "is_peer_id",
    "mask_peer_id",
    "normalize_address",
    "now_ms",
]
