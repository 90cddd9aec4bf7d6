"""Abstract base class for live-status provider clients.

A provider turns a set of platform handles into a mapping from lowercased
handle to the platform's raw status payload, for the handles that are live
right now.  The base class owns everything the providers have in common:

- handle normalisation (lowercase, dedupe, sort),
- the read-through/write-through result cache, keyed per time bucket,
- conversion of internal exceptions into a :class:`ProviderResult`, so that
  nothing a provider does can raise past :meth:`LiveStatusProvider.fetch`,
- metrics and the shape of the health-check report.

Subclasses implement ``is_configured``, ``_fetch_uncached`` and ``_probe``.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
from typing import Any

import httpx

from live_observatory.core.cache import (
    CacheKey,
    ResultCache,
    StatusMap,
    normalize_identifiers,
)
from live_observatory.core.exceptions import (
    ConfigurationMissingError,
    CredentialUnavailableError,
    UpstreamRateLimitError,
    UpstreamUnavailableError,
)
from live_observatory.core.http import (
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    http_session,
)
from live_observatory.core.metrics import provider_fetch_total, result_cache_lookups_total
from live_observatory.core.outcome import FailureKind, ProviderResult

logger = logging.getLogger(__name__)


def chunked(items: tuple[str, ...], size: int) -> list[tuple[str, ...]]:
    """Split *items* into consecutive tuples of at most *size* elements."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class LiveStatusProvider(ABC):
    """Base class for the Twitch and X Spaces clients.

    Class Attributes:
        provider_name: Identifier used in logs, metrics and errors.
        cache_namespace: Prefix of this provider's cache keys.
        bucket_seconds: Width of the cache time bucket; also the entry TTL.

    Args:
        cache: Shared result cache.
        http_client: Optional injected :class:`httpx.AsyncClient`; when
            ``None`` a short-lived client is built per fetch.
        clock: Returns the current time in seconds.  Injected by tests.
        timeout: Per-request timeout for clients built here.
        retries: Transport retries for clients built here.
    """

    provider_name: str
    cache_namespace: str
    bucket_seconds: int

    def __init__(
        self,
        cache: ResultCache,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self._cache = cache
        self._http_client = http_client
        self._clock = clock
        self._timeout = timeout
        self._retries = retries

    # ------------------------------------------------------------------
    # Interface implemented by each provider
    # ------------------------------------------------------------------

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when every credential and URL the provider needs is set."""

    @abstractmethod
    async def _fetch_uncached(self, handles: tuple[str, ...]) -> StatusMap:
        """Query the upstream for *handles* (lowercased, sorted, non-empty).

        Raises:
            ConfigurationMissingError: A required setting is absent.
            CredentialUnavailableError: No access token could be obtained.
            UpstreamUnavailableError: The upstream call failed.
        """

    @abstractmethod
    async def _probe(self) -> str:
        """Issue one cheap authenticated request; return a detail string.

        Raises the same exceptions as :meth:`_fetch_uncached` on failure.
        """

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    async def fetch(self, handles: Iterable[str]) -> ProviderResult:
        """Return live statuses for *handles*, served from cache when possible.

        Never raises.  Failures are logged and reported through
        :attr:`ProviderResult.failure`; failed fetches are not cached.
        """
        keys = normalize_identifiers(handles)
        if not keys:
            return ProviderResult.success({})

        if not self.is_configured():
            logger.warning("%s: provider not configured, skipping", self.provider_name)
            return self._record(ProviderResult.failed(FailureKind.CONFIGURATION_MISSING))

        cache_key = CacheKey.build(
            self.cache_namespace, keys, self.bucket_seconds, now=self._clock()
        )
        cached = await self._cache.get(cache_key)
        if cached is not None:
            result_cache_lookups_total.labels(provider=self.provider_name, result="hit").inc()
            logger.debug(
                "%s: cache hit handles=%d live=%d",
                self.provider_name,
                len(keys),
                len(cached),
            )
            return self._record(ProviderResult.success(cached, from_cache=True))
        result_cache_lookups_total.labels(provider=self.provider_name, result="miss").inc()

        try:
            statuses = await self._fetch_uncached(keys)
        except ConfigurationMissingError as exc:
            logger.warning("%s: %s", self.provider_name, exc)
            return self._record(ProviderResult.failed(FailureKind.CONFIGURATION_MISSING))
        except CredentialUnavailableError:
            logger.info("%s: no access token, contributing no live statuses", self.provider_name)
            return self._record(ProviderResult.failed(FailureKind.CREDENTIAL_UNAVAILABLE))
        except UpstreamUnavailableError as exc:
            logger.error("%s: failed to fetch live statuses: %s", self.provider_name, exc)
            return self._record(ProviderResult.failed(FailureKind.UPSTREAM_UNAVAILABLE))
        except Exception:
            logger.exception("%s: unexpected error while fetching live statuses", self.provider_name)
            return self._record(ProviderResult.failed(FailureKind.UPSTREAM_UNAVAILABLE))

        await self._cache.set(cache_key, statuses, ttl=self.bucket_seconds)
        logger.info(
            "%s: fetched live statuses handles=%d live=%d",
            self.provider_name,
            len(keys),
            len(statuses),
        )
        return self._record(ProviderResult.success(statuses))

    async def health_check(self) -> dict[str, Any]:
        """Report whether the provider is configured and reachable.

        Returns:
            Dict with ``provider``, ``status`` (``"ok"`` | ``"down"`` |
            ``"not_configured"``), ``checked_at`` and ``detail``.  Never raises.
        """
        base: dict[str, Any] = {
            "provider": self.provider_name,
            "checked_at": datetime.now(timezone.utc).isoformat(),
        }
        if not self.is_configured():
            return {**base, "status": "not_configured", "detail": "credentials not configured"}
        try:
            detail = await self._probe()
        except CredentialUnavailableError:
            return {**base, "status": "down", "detail": "no access token available"}
        except UpstreamUnavailableError as exc:
            return {**base, "status": "down", "detail": str(exc)}
        except Exception as exc:  # noqa: BLE001
            return {**base, "status": "down", "detail": f"Unexpected error: {exc}"}
        return {**base, "status": "ok", "detail": detail}

    def _http(self) -> AbstractAsyncContextManager[httpx.AsyncClient]:
        return http_session(self._http_client, timeout=self._timeout, retries=self._retries)

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        endpoint: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """GET *url* and return the decoded JSON object.

        Raises:
            UpstreamRateLimitError: On HTTP 429.
            UpstreamUnavailableError: On request errors, other non-2xx
                statuses, or a body that is not a JSON object.
        """
        try:
            response = await client.get(url, **kwargs)
        except httpx.RequestError as exc:
            raise UpstreamUnavailableError(
                f"request error on {endpoint}: {exc!r}",
                provider=self.provider_name,
            ) from exc

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            raise UpstreamRateLimitError(
                f"rate limited on {endpoint}; retry_after={retry_after}s",
                retry_after=retry_after,
                provider=self.provider_name,
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                f"HTTP {exc.response.status_code} on {endpoint}",
                provider=self.provider_name,
                status_code=exc.response.status_code,
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(
                f"invalid JSON body on {endpoint}",
                provider=self.provider_name,
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(
                f"unexpected body type on {endpoint}: {type(data).__name__}",
                provider=self.provider_name,
                status_code=response.status_code,
            )
        return data

    def _record(self, result: ProviderResult) -> ProviderResult:
        if result.failure is not None:
            outcome = result.failure.value
        elif result.from_cache:
            outcome = "cached"
        else:
            outcome = "ok"
        provider_fetch_total.labels(provider=self.provider_name, outcome=outcome).inc()
        return result


def _parse_retry_after(value: str | None) -> float:
    try:
        return float(value) if value else 60.0
    except ValueError:
        return 60.0
