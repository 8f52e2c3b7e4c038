# site_mirror/crawler/transport.py
"""
Transport module: performs HTTP requests with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence

from aiohttp import (
    ClientConnectionError,
    ClientError,
    ClientPayloadError,
    ClientSession,
    ClientTimeout,
)

from site_mirror.config import MirrorConfig
from site_mirror.crawler.models import Response
from site_mirror.errors import TransportFailure
from site_mirror.logger import logger

__all__ = ("Transport", "HttpTransport", "RETRY_STATUS")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
_MAX_BACKOFF = 60.0


class Transport(Protocol):
    """Anything able to fetch one URL."""

    async def fetch(self, url: str) -> Response:
        ...


class _RetryableStatus(ClientError):
    def __init__(self, status: int) -> None:
        super().__init__(f"retryable status {status}")
        self.status = status


# transient failures worth another attempt; any other ClientError is final
_RETRYABLE = (ClientConnectionError, ClientPayloadError, _RetryableStatus)


class HttpTransport:
    """aiohttp-backed transport with retries on 5xx/429, connection and payload errors."""

    def __init__(
        self,
        config: MirrorConfig,
        session: Optional[ClientSession] = None,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._retry_status = retry_status

    async def __aenter__(self) -> HttpTransport:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> Response:
        """
        Fetch *url* and return its status, headers and raw body bytes.

        Raises TransportFailure on error statuses, timeouts and exhausted retries.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status:
                        raise _RetryableStatus(resp.status)
                    if resp.status >= 400:
                        raise TransportFailure(url, f"HTTP {resp.status}", status=resp.status)
                    body = await resp.read()
                    return Response(status=resp.status, headers=dict(resp.headers), body=body)
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise TransportFailure(url, f"timed out after {self.config.timeout} s") from exc
            except _RETRYABLE as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    status = exc.status if isinstance(exc, _RetryableStatus) else None
                    raise TransportFailure(url, str(exc) or type(exc).__name__, status=status) from exc
                backoff = min(self.config.retry_backoff * 2 ** (attempts - 1), _MAX_BACKOFF)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)
            except ClientError as exc:
                raise TransportFailure(url, str(exc) or type(exc).__name__) from exc
