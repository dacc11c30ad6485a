# site_mirror/crawler/fetcher.py
"""
Transport: handles HTTP requests with rate limiting, retry/backoff, and timeout.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Any, Optional, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mirror.crawler.models import FetchResult
from site_mirror.errors import TransportFailure
from site_mirror.logger import logger

__all__ = ("Transport", "HttpTransport")


class Transport(Protocol):
    """Anything that can turn a URL into a :class:`FetchResult`."""

    async def fetch(self, url: str) -> FetchResult:
        """Return the response or raise :class:`TransportFailure`."""
        ...


class HttpTransport:
    """aiohttp transport with rate limit, bounded concurrency and retries."""

    RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
    MAX_BACKOFF: float = 60.0

    def __init__(self, config: Any, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.retry_times: int = getattr(config, "retry_times", 2)
        self.retry_backoff: float = getattr(config, "retry_backoff", 1.0)
        self.session = session
        self._owns_session = session is None
        self._semaphore = asyncio.Semaphore(getattr(config, "concurrency", 8))
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0
        self.requests_made = 0

    async def __aenter__(self) -> HttpTransport:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchResult:
        if not self.session:
            raise RuntimeError("Session not initialized")
        async with self._semaphore:
            return await self._fetch_with_retries(url)

    async def _fetch_with_retries(self, url: str) -> FetchResult:
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                return await self._get(url)
            except asyncio.TimeoutError:
                # no retry on timeout
                raise TransportFailure(url, "timed out") from None
            except ClientError as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise TransportFailure(url, str(exc) or type(exc).__name__) from exc
                backoff = min(self.MAX_BACKOFF, self.retry_backoff * (2**attempts + random.random()))
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)

    async def _get(self, url: str) -> FetchResult:
        self.requests_made += 1
        async with self.session.get(url) as resp:
            status = resp.status
            if status in self.RETRY_STATUS:
                raise ClientError(f"retryable status {status}")
            if not 200 <= status < 300:
                raise TransportFailure(url, resp.reason or "unexpected status", status)
            body = await resp.read()
            return FetchResult(
                url=url,
                body=body,
                content_type=resp.headers.get("Content-Type", ""),
                charset=resp.charset,
                final_url=str(resp.url),
            )

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
