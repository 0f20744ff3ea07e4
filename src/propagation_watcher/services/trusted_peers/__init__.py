"""Trusted peers tracking (top-peers endpoint polling)."""

from propagation_watcher.services.trusted_peers.trusted_peers_tracker import TrustedPeersTracker

__all__ = ["TrustedPeersTracker"]
