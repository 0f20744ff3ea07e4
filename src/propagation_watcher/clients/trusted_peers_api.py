# -*- coding: utf-8 -*-
"""Client for the top-peers endpoint (GET <base_url>/top-peers)."""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from propagation_watcher.config import Settings
from propagation_watcher.exceptions import UpstreamAPIError

if TYPE_CHECKING:
    from propagation_watcher.clients.http import AsyncHttpClient


class TrustedPeersApiClient:
    """Fetches the current list of trusted peer ids."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def base_url(self) -> str:
        return self._settings.trusted_peers.base_url.strip().rstrip("/")

    async def get_top_peers(self) -> List[str]:
        """Return the peer ids served by the endpoint.

        Raises:
            UpstreamAPIError: Request failed, or the body is not a JSON list of strings.
        """
        url = f"{self.base_url}/top-peers"
        data = await self._http.get(url)
        if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
            self._logger.warning(
                "top_peers_invalid_payload",
                payload_type=type(data).__name__,
            )
            raise UpstreamAPIError("top-peers response is not a list of strings", url=url)
        peers = [p.strip() for p in data if p.strip()]
        self._logger.debug("top_peers_fetched", peer_count=len(peers))
        return peers
