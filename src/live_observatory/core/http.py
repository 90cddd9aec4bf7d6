"""Outbound HTTP client construction.

Every provider request goes through a client built here so that the
timeout and the small connection-retry budget are applied uniformly.
``httpx.AsyncHTTPTransport(retries=...)`` retries connection failures only;
there is no engine-level retry or backoff on top of it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

DEFAULT_TIMEOUT_SECONDS: float = 5.0
DEFAULT_RETRIES: int = 1

USER_AGENT: str = "LiveObservatory/0.1 (live-status poller)"


def build_http_client(
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    retries: int = DEFAULT_RETRIES,
) -> httpx.AsyncClient:
    """Return a new :class:`httpx.AsyncClient` with timeout and retries applied."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        transport=httpx.AsyncHTTPTransport(retries=retries),
        headers={"User-Agent": USER_AGENT},
    )


@asynccontextmanager
async def http_session(
    client: httpx.AsyncClient | None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    retries: int = DEFAULT_RETRIES,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* untouched, or a short-lived client closed on exit.

    Injected clients belong to the caller and are never closed here.
    """
    if client is not None:
        yield client
        return
    async with build_http_client(timeout=timeout, retries=retries) as owned:
        yield owned
