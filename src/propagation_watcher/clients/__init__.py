"""HTTP and API clients."""

from propagation_watcher.clients.http import AsyncHttpClient
from propagation_watcher.clients.trusted_peers_api import TrustedPeersApiClient

__all__ = [
    "AsyncHttpClient",
    "TrustedPeersApiClient",
]
