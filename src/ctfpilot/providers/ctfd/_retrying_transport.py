"""httpx async transport wrapper with retry, backoff, and rate-limit handling."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

# Gateway errors CTFd (or the reverse proxy in front of it) returns while busy.
_RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})

# A non-idempotent request that may have reached CTFd is never replayed:
# a second POST would create a duplicate flag, hint or file.
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx async transport with automatic retry on transient failures.

    - HTTP 429 is retried for every method, after honouring ``Retry-After``.
      The pause is shared so that queued requests wait as well.
    - 502 / 503 / 504 and transport errors are retried for idempotent
      methods only.
    - Connection failures (nothing sent) are retried for every method.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        max_backoff: float = 4.0,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._max_backoff = max_backoff

        self._rate_limit_lock = asyncio.Lock()
        self._rate_limit_clear = asyncio.Event()
        self._rate_limit_clear.set()
        self._rate_limit_pause_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        replayable = request.method.upper() in _IDEMPOTENT_METHODS
        for attempt in range(self._max_retries + 1):
            await self._rate_limit_clear.wait()

            try:
                response = await self._transport.handle_async_request(request)
            except httpx.ConnectError:
                if attempt >= self._max_retries:
                    raise
                await self._sleep_backoff(request, attempt, "connection failed")
                continue
            except httpx.TransportError:
                if not replayable or attempt >= self._max_retries:
                    raise
                await self._sleep_backoff(request, attempt, "transport error")
                continue

            if response.status_code == 429:
                if attempt >= self._max_retries:
                    return response
                await response.aclose()
                await self._apply_rate_limit_pause(self._parse_retry_after(response))
                await self._sleep_backoff(request, attempt, "rate limited")
                continue

            if response.status_code in _RETRYABLE_STATUS_CODES and replayable and attempt < self._max_retries:
                await response.aclose()
                retry_after = self._parse_retry_after(response, default=0.0)
                if retry_after > 0:
                    await asyncio.sleep(retry_after)
                await self._sleep_backoff(request, attempt, f"HTTP {response.status_code}")
                continue

            return response

        raise httpx.TransportError("Request failed after retries")  # pragma: no cover

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _apply_rate_limit_pause(self, retry_after: float) -> None:
        now = time.monotonic()
        async with self._rate_limit_lock:
            until = now + max(0.0, retry_after)
            if until <= self._rate_limit_pause_until:
                return
            self._rate_limit_pause_until = until
            self._rate_limit_clear.clear()

        await asyncio.sleep(max(0.0, self._rate_limit_pause_until - time.monotonic()))

        async with self._rate_limit_lock:
            if time.monotonic() >= self._rate_limit_pause_until:
                self._rate_limit_clear.set()

    @staticmethod
    def _parse_retry_after(response: httpx.Response, *, default: float = 1.0) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return default
        try:
            return max(0.0, float(raw))
        except ValueError:
            return default

    async def _sleep_backoff(self, request: httpx.Request, attempt: int, reason: str) -> None:
        seconds = min(self._max_backoff, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning(
            "Retrying CTFd %s %s after %s (attempt %d)", request.method, request.url.path, reason, attempt + 1
        )
        await asyncio.sleep(seconds)
