"""X API v2 live Spaces client.

Two phases per fetch:

1. ``GET /2/users/by?usernames=a,b,...`` resolves handles to user IDs
   (batches of 100).  A failure here fails the whole fetch.
2. ``GET /2/spaces/by/creator_ids?user_ids=<id>`` per resolved user, keeping
   only spaces whose ``state`` is ``"live"``.  A failure for one user is
   logged at debug level and that user is skipped.

The bearer token is a static app-only credential, so there is no refresh
flow: without it the provider is simply not configured.

The result is keyed by the queried handle (lowercased) that resolved to the
user, and cached for a 15-minute bucket even when some users were skipped
in phase 2.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import httpx

from live_observatory.core.cache import ResultCache, StatusMap
from live_observatory.core.exceptions import (
    ConfigurationMissingError,
    UpstreamUnavailableError,
)
from live_observatory.core.http import DEFAULT_RETRIES, DEFAULT_TIMEOUT_SECONDS
from live_observatory.providers.base import LiveStatusProvider, chunked
from live_observatory.providers.x_spaces.config import (
    CACHE_BUCKET_SECONDS,
    CACHE_NAMESPACE,
    HEALTH_CHECK_USERNAME,
    LIVE_STATE,
    PROVIDER_NAME,
    SPACE_FIELDS,
    SPACES_BY_CREATOR_ENDPOINT,
    USERS_BY_ENDPOINT,
    USERS_LOOKUP_BATCH_SIZE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedUser:
    """A queried handle and the X user ID it resolved to."""

    user_id: str
    handle: str


class XSpacesClient(LiveStatusProvider):
    """Fetches live Spaces for X handles.

    Args:
        bearer_token: App-only bearer token.  ``None``/empty disables the client.
        api_base_url: X API v2 base URL, e.g. ``https://api.twitter.com/2``.
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
        bearer_token: str | None,
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
        self._bearer_token = bearer_token
        self._api_base_url = api_base_url.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self._bearer_token and self._api_base_url)

    async def fetch_live_spaces(self, handles: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Return ``{lowercased handle: space payload}`` for handles hosting a live Space.

        Never raises; any failure yields an empty mapping.
        """
        return (await self.fetch(handles)).statuses

    async def _fetch_uncached(self, handles: tuple[str, ...]) -> StatusMap:
        if not self._bearer_token:
            raise ConfigurationMissingError(PROVIDER_NAME, "x_bearer_token")

        spaces: StatusMap = {}
        async with self._http() as client:
            users = await self._resolve_users(client, handles)
            for user in users:
                try:
                    user_spaces = await self._get_spaces(client, user.user_id)
                except UpstreamUnavailableError as exc:
                    logger.debug(
                        "x_spaces: failed to check spaces for user %s: %s",
                        user.handle,
                        exc,
                    )
                    continue
                for space in user_spaces:
                    if space.get("state") == LIVE_STATE:
                        spaces[user.handle] = space

        logger.debug(
            "x_spaces: spaces queried handles=%d resolved=%d live=%d",
            len(handles),
            len(users),
            len(spaces),
        )
        return spaces

    async def _resolve_users(
        self,
        client: httpx.AsyncClient,
        handles: tuple[str, ...],
    ) -> list[ResolvedUser]:
        """Resolve *handles* to user IDs via ``GET /users/by``.

        Handles the API does not know are simply absent from the result.
        Users returned for a username that was not queried are dropped and
        never sent a Spaces request.
        """
        queried = {handle.lower(): handle for handle in handles}
        users: list[ResolvedUser] = []
        for batch in chunked(handles, USERS_LOOKUP_BATCH_SIZE):
            data = await self._get_json(
                client,
                f"{self._api_base_url}{USERS_BY_ENDPOINT}",
                USERS_BY_ENDPOINT,
                params={"usernames": ",".join(batch)},
                headers=self._headers(),
            )
            for entry in data.get("data") or []:
                if not isinstance(entry, dict):
                    continue
                user_id = entry.get("id")
                username = str(entry.get("username") or "").lower()
                if not user_id or not username:
                    continue
                handle = queried.get(username)
                if handle is None:
                    logger.debug("x_spaces: ignoring unrequested user %s", username)
                    continue
                users.append(ResolvedUser(user_id=str(user_id), handle=handle))
        return users

    async def _get_spaces(self, client: httpx.AsyncClient, user_id: str) -> list[dict[str, Any]]:
        data = await self._get_json(
            client,
            f"{self._api_base_url}{SPACES_BY_CREATOR_ENDPOINT}",
            SPACES_BY_CREATOR_ENDPOINT,
            params={"user_ids": user_id, "space.fields": SPACE_FIELDS},
            headers=self._headers(),
        )
        return [s for s in data.get("data") or [] if isinstance(s, dict)]

    async def _probe(self) -> str:
        async with self._http() as client:
            data = await self._get_json(
                client,
                f"{self._api_base_url}{USERS_BY_ENDPOINT}",
                USERS_BY_ENDPOINT,
                params={"usernames": HEALTH_CHECK_USERNAME},
                headers=self._headers(),
            )
        return f"X API reachable; users_returned={len(data.get('data') or [])}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._bearer_token}"}
