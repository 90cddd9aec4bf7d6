"""App access token manager for the Client Credentials grant.

Holds one in-memory :class:`AccessToken` and refreshes it lazily.  The
token and its expiry travel together in a single frozen object that is
swapped in one assignment, so a reader can never observe a new token with
an old expiry.  Refreshes are serialised by an :class:`asyncio.Lock` and
double-checked: concurrent callers that find the token stale share a single
exchange.

The manager never raises.  Missing credentials and failed exchanges both
yield ``""``, which callers treat as "feature unavailable".

Usage::

    tokens = AppTokenManager(
        client_id=settings.twitch_client_id,
        client_secret=settings.twitch_client_secret,
        token_url=settings.twitch_token_url,
    )
    token = await tokens.get_token()
    if not token:
        return {}
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from live_observatory.core.http import (
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    http_session,
)

logger = logging.getLogger(__name__)

REFRESH_MARGIN_SECONDS: int = 3600
"""Tokens are refreshed this long before the provider says they expire."""


@dataclass(frozen=True)
class AccessToken:
    """A provider access token and the instant (epoch seconds) it stops being used."""

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.value) and now < self.expires_at


def compute_expiry(now: float, expires_in: float, margin: float = REFRESH_MARGIN_SECONDS) -> float:
    """Return the local expiry for a token the provider granted for *expires_in* seconds.

    Normally ``now + expires_in - margin``.  When the provider TTL does not
    exceed the margin, half the TTL is kept instead so a fresh token is
    usable at least once.
    """
    if expires_in > margin:
        return now + expires_in - margin
    return now + expires_in / 2


class AppTokenManager:
    """Acquires and caches an OAuth app access token.

    Args:
        client_id: OAuth client ID.  ``None``/empty disables the manager.
        client_secret: OAuth client secret.  ``None``/empty disables the manager.
        token_url: Token endpoint accepting ``grant_type=client_credentials``.
        provider: Name used in log lines.
        http_client: Optional shared :class:`httpx.AsyncClient`; never closed here.
        clock: Returns the current time in seconds.  Injected by tests.
        timeout: Request timeout when no client is injected.
        retries: Transport retries when no client is injected.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        token_url: str,
        provider: str = "twitch",
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._provider = provider
        self._http_client = http_client
        self._clock = clock
        self._timeout = timeout
        self._retries = retries
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._token_url)

    @property
    def current(self) -> AccessToken | None:
        """The cached token, valid or not.  Exposed for diagnostics and tests."""
        return self._token

    async def get_token(self) -> str:
        """Return a valid access token, refreshing it if needed, or ``""``."""
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token.value

        if not self.configured:
            logger.warning("%s: API credentials not configured", self._provider)
            return ""

        async with self._lock:
            # Another caller may have refreshed while we waited.
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token.value

            fresh = await self._request_token()
            if fresh is None:
                return ""
            self._token = fresh
            return fresh.value

    def invalidate(self) -> None:
        """Forget the cached token so the next call performs a fresh exchange."""
        self._token = None

    async def _request_token(self) -> AccessToken | None:
        """Run the Client Credentials exchange.  Logs and returns ``None`` on failure."""
        try:
            async with http_session(
                self._http_client, timeout=self._timeout, retries=self._retries
            ) as client:
                response = await client.post(
                    self._token_url,
                    params={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "grant_type": "client_credentials",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "%s: failed to obtain app access token: HTTP %d",
                self._provider,
                exc.response.status_code,
            )
            return None
        except httpx.RequestError as exc:
            logger.error(
                "%s: connection error obtaining app access token: %s",
                self._provider,
                exc,
            )
            return None
        except ValueError:
            logger.error("%s: token response was not valid JSON", self._provider)
            return None

        value = data.get("access_token") if isinstance(data, dict) else None
        if not value:
            logger.error("%s: token response missing 'access_token' field", self._provider)
            return None

        try:
            expires_in = float(data.get("expires_in", 0))
        except (TypeError, ValueError):
            expires_in = 0.0

        now = self._clock()
        logger.info(
            "%s: new app access token acquired (expires_in=%ds)",
            self._provider,
            int(expires_in),
        )
        return AccessToken(value=str(value), expires_at=compute_expiry(now, expires_in))
