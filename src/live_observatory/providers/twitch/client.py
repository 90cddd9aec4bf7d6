"""Twitch live-stream status client.

Queries ``GET /helix/streams`` for batches of up to 100 logins using an app
access token from :class:`~live_observatory.core.token_manager.AppTokenManager`.
Only channels that are live appear in the response, so the returned mapping
holds exactly the live handles::

    {"foo": {"user_login": "Foo", "title": "...", "viewer_count": 50,
             "started_at": "2026-10-17T18:00:00Z", ...}}

Batches run sequentially.  A failure in any batch fails the whole fetch:
partial batch results are discarded rather than cached for two minutes.
A 401 drops the cached token so the next fetch re-authenticates.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from live_observatory.core.cache import ResultCache, StatusMap
from live_observatory.core.exceptions import (
    ConfigurationMissingError,
    CredentialUnavailableError,
    UpstreamUnavailableError,
)
from live_observatory.core.http import DEFAULT_RETRIES, DEFAULT_TIMEOUT_SECONDS
from live_observatory.core.token_manager import AppTokenManager
from live_observatory.providers.base import LiveStatusProvider, chunked
from live_observatory.providers.twitch.config import (
    CACHE_BUCKET_SECONDS,
    CACHE_NAMESPACE,
    PROVIDER_NAME,
    STREAMS_BATCH_SIZE,
    STREAMS_ENDPOINT,
)

logger = logging.getLogger(__name__)


class TwitchStreamsClient(LiveStatusProvider):
    """Fetches live-stream status for Twitch logins.

    Args:
        token_manager: Owner of the app access token.  Shared with any other
            Twitch caller in the process.
        client_id: Twitch Client ID for the ``Client-ID`` header.
        api_base_url: Helix base URL, e.g. ``https://api.twitch.tv/helix``.
        cache: Shared result cache.
        http_client: Optional injected :class:`httpx.AsyncClient`.
        clock: Returns the current time in seconds.
        timeout: Per-request timeout.
        retries: Transport retries.
    """

    provider_name = PROVIDER_NAME
    cache_namespace = CACHE_NAMESPACE
    bucket_seconds = CACHE_BUCKET_SECONDS

    def __init__(
        self,
        token_manager: AppTokenManager,
        client_id: str | None,
        api_base_url: str,
        cache: ResultCache,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        super().__init__(
            cache=cache,
            http_client=http_client,
            clock=clock,
            timeout=timeout,
            retries=retries,
        )
        self._tokens = token_manager
        self._client_id = client_id
        self._api_base_url = api_base_url.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self._client_id and self._api_base_url and self._tokens.configured)

    async def fetch_live_status(self, handles: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Return ``{lowercased login: stream payload}`` for the live *handles*.

        Never raises; any failure yields an empty mapping.
        """
        return (await self.fetch(handles)).statuses

    async def _fetch_uncached(self, handles: tuple[str, ...]) -> StatusMap:
        if not self._client_id:
            raise ConfigurationMissingError(PROVIDER_NAME, "twitch_client_id")

        token = await self._tokens.get_token()
        if not token:
            raise CredentialUnavailableError(PROVIDER_NAME)

        statuses: StatusMap = {}
        batches = chunked(handles, STREAMS_BATCH_SIZE)
        async with self._http() as client:
            for batch in batches:
                for stream in await self._get_streams(client, token, batch):
                    login = stream.get("user_login")
                    if isinstance(login, str) and login:
                        statuses[login.lower()] = stream

        logger.debug(
            "twitch: streams queried batches=%d logins=%d live=%d",
            len(batches),
            len(handles),
            len(statuses),
        )
        return statuses

    async def _get_streams(
        self,
        client: httpx.AsyncClient,
        token: str,
        logins: tuple[str, ...],
    ) -> list[dict[str, Any]]:
        """Run one ``GET /streams`` call for at most 100 *logins*."""
        try:
            data = await self._get_json(
                client,
                f"{self._api_base_url}{STREAMS_ENDPOINT}",
                STREAMS_ENDPOINT,
                params=[("user_login", login) for login in logins],
                headers=self._headers(token),
            )
        except UpstreamUnavailableError as exc:
            if exc.status_code == 401:
                self._tokens.invalidate()
            raise

        streams = data.get("data") or []
        if not isinstance(streams, list):
            raise UpstreamUnavailableError(
                f"unexpected 'data' field on {STREAMS_ENDPOINT}",
                provider=PROVIDER_NAME,
            )
        return [s for s in streams if isinstance(s, dict)]

    async def _probe(self) -> str:
        token = await self._tokens.get_token()
        if not token:
            raise CredentialUnavailableError(PROVIDER_NAME)
        async with self._http() as client:
            data = await self._get_json(
                client,
                f"{self._api_base_url}{STREAMS_ENDPOINT}",
                STREAMS_ENDPOINT,
                params={"first": 1},
                headers=self._headers(token),
            )
        return f"Helix API reachable; streams_returned={len(data.get('data') or [])}"

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Client-ID": self._client_id or "",
            "Authorization": f"Bearer {token}",
        }
