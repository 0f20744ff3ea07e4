# -*- coding: utf-8 -*-
"""Async HTTP client with retries and rate-limit handling."""

from __future__ import annotations

import asyncio
import random
import uuid
import aiohttp
import structlog
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from propagation_watcher.config import Settings
from propagation_watcher.exceptions import RateLimitError, UpstreamAPIError


def _parse_retry_after(header: Optional[str]) -> Optional[float]:
    if not header:
        return None
    try:
        value = float(header)
    except ValueError:
        return None
    return value if value > 0 else None


class AsyncHttpClient:
    """GET-only JSON client over aiohttp.

    A session passed in is borrowed and left open by aclose(); otherwise the
    client creates one lazily and closes it itself.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _backoff_delay(self, attempt: int) -> float:
        return min(4.0, 0.25 * (2**attempt)) + random.uniform(0.0, 0.15)

    async def _attempt(self, url: str, params: Dict[str, Any]) -> tuple[bool, Any]:
        """One GET. Returns (True, body) on success or (False, retry_after) on 429."""
        session = await self._get_session()
        async with session.get(url, params=params) as response:
            if response.status == 429:
                return False, _parse_retry_after(response.headers.get("Retry-After"))
            response.raise_for_status()
            return True, await response.json()

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``url`` and decode the JSON body.

        Transport errors and error statuses are retried with jittered
        exponential backoff. A 429 waits for Retry-After when the server
        sends one.

        Raises:
            RateLimitError: The final attempt was still answered with 429.
            UpstreamAPIError: Any other failure once attempts run out.
        """
        attempts = max(1, self._settings.api.max_retries)
        failure: Optional[Exception] = None
        retry_after: Optional[float] = None

        with bound_contextvars(http_url=url, http_request_id=uuid.uuid4().hex[:12]):
            for attempt in range(attempts):
                last = attempt == attempts - 1
                try:
                    ok, value = await self._attempt(url, params or {})
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    failure, retry_after = e, None
                    self._logger.debug(
                        "http_get_retry",
                        http_attempt=attempt + 1,
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                    if not last:
                        await self._sleep(self._backoff_delay(attempt))
                    continue
                if ok:
                    return value
                failure, retry_after = None, value
                self._logger.warning(
                    "http_get_rate_limited", http_attempt=attempt + 1, http_retry_after_seconds=value
                )
                if not last:
                    await self._sleep(value or self._backoff_delay(attempt))

            if failure is None:
                self._logger.error("http_get_rate_limit_exhausted", http_attempts=attempts)
                raise RateLimitError(url=url, retry_after=retry_after)

            status = failure.status if isinstance(failure, aiohttp.ClientResponseError) else None
            self._logger.error(
                "http_get_failed",
                http_attempts=attempts,
                http_status_code=status,
                error_type=type(failure).__name__,
                error_message=str(failure),
            )
            raise UpstreamAPIError(
                f"GET {url} failed after {attempts} attempts",
                url=url,
                status_code=status,
                cause=failure,
            ) from failure
