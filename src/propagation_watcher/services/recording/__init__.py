# -*- coding: utf-8 -*-
"""Recorders: persistence of sightings, details and block fetches with explicit failure policies."""

from propagation_watcher.services.recording.block_fetch_recorder import BlockFetchRecorder
from propagation_watcher.services.recording.policy import (
    BLOCK_DEFAULT,
    DETAIL_DEFAULT,
    SIGHTING_DEFAULT,
    PersistKind,
    PersistPolicy,
    run_with_policy,
)
from propagation_watcher.services.recording.sighting_recorder import SightingRecorder
from propagation_watcher.services.recording.tx_detail_recorder import TxDetailRecorder

__all__ = [
    "BLOCK_DEFAULT",
    "BlockFetchRecorder",
    "DETAIL_DEFAULT",
    "PersistKind",
    "PersistPolicy",
    "SIGHTING_DEFAULT",
    "SightingRecorder",
    "TxDetailRecorder",
    "run_with_policy",
]
