"""Short-TTL result cache shared by the provider clients.

Keys are structured :class:`CacheKey` values — a namespace, the sorted and
deduplicated set of queried identifiers, and a time-bucket index — hashed
into a stable fingerprint.  Two polls for the same handle set inside the
same bucket therefore land on the same entry, whatever order the handles
arrived in.

The store interface is deliberately narrow (``get`` / ``set``) so the
in-process store and the Redis store are interchangeable::

    cache = InMemoryResultCache()
    key = CacheKey.build("twitch_streams", {"Foo", "bar"}, bucket_seconds=120)
    if (hit := await cache.get(key)) is None:
        await cache.set(key, {"foo": {...}}, ttl=120)

Entries are never invalidated explicitly; they only expire.  There is no
eviction beyond TTL, so the in-process store grows with the number of
distinct handle sets polled per bucket.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

StatusMap = dict[str, dict[str, Any]]
"""Lowercased handle -> raw upstream payload."""

_REDIS_KEY_PREFIX: str = "live:result_cache:"


def normalize_identifiers(identifiers: Iterable[str]) -> tuple[str, ...]:
    """Lowercase, strip, drop empties, deduplicate and sort *identifiers*."""
    return tuple(sorted({i.strip().lower() for i in identifiers if i and i.strip()}))


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key for one provider poll.

    Attributes:
        namespace: Provider-specific prefix (e.g. ``"twitch_streams"``).
        identifiers: Sorted, lowercased, deduplicated handles.
        bucket: ``floor(now / bucket_seconds)`` at the time of the poll.
    """

    namespace: str
    identifiers: tuple[str, ...]
    bucket: int

    @classmethod
    def build(
        cls,
        namespace: str,
        identifiers: Iterable[str],
        bucket_seconds: int,
        now: float | None = None,
    ) -> CacheKey:
        """Build a key for *identifiers* in the bucket containing *now*."""
        if now is None:
            now = time.time()
        return cls(
            namespace=namespace,
            identifiers=normalize_identifiers(identifiers),
            bucket=int(now // bucket_seconds),
        )

    @property
    def fingerprint(self) -> str:
        """SHA-256 hex digest of the namespace, identifiers and bucket."""
        raw = f"{self.namespace}|{','.join(self.identifiers)}|{self.bucket}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ResultCache(Protocol):
    """Key/value store with per-entry TTL.

    Implementations must be safe for concurrent use and must never raise:
    a broken store behaves like a permanently empty one.
    """

    async def get(self, key: CacheKey) -> StatusMap | None: ...

    async def set(self, key: CacheKey, value: StatusMap, ttl: int) -> None: ...


class InMemoryResultCache:
    """Process-local :class:`ResultCache` guarded by a lock.

    Values are deep-copied on the way in and out so callers cannot mutate
    a cached mapping through a reference they hold.

    Args:
        clock: Returns the current time in seconds.  Injected by tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, StatusMap]] = {}
        self._lock = threading.Lock()

    async def get(self, key: CacheKey) -> StatusMap | None:
        fingerprint = key.fingerprint
        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[fingerprint]
                return None
            return copy.deepcopy(value)

    async def set(self, key: CacheKey, value: StatusMap, ttl: int) -> None:
        expires_at = self._clock() + ttl
        with self._lock:
            self._entries[key.fingerprint] = (expires_at, copy.deepcopy(value))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisResultCache:
    """Redis-backed :class:`ResultCache` shared across worker processes.

    Values are stored as JSON under ``live:result_cache:<namespace>:<fingerprint>`` with
    ``SETEX``.  Connection and decoding errors are logged and swallowed.

    Args:
        redis_url: Redis connection URL.  Ignored when *client* is given.
        client: Optional pre-built :class:`redis.asyncio.Redis` (tests).
    """

    def __init__(self, redis_url: str | None = None, client: Any | None = None) -> None:
        self._redis_url = redis_url
        self._redis = client

    def _get_redis(self) -> Any:
        if self._redis is not None:
            return self._redis
        import redis.asyncio as aioredis  # noqa: PLC0415

        self._redis = aioredis.from_url(
            self._redis_url or "redis://localhost:6379/0",
            encoding="utf-8",
            decode_responses=True,
        )
        return self._redis

    @staticmethod
    def _redis_key(key: CacheKey) -> str:
        return f"{_REDIS_KEY_PREFIX}{key.namespace}:{key.fingerprint}"

    async def get(self, key: CacheKey) -> StatusMap | None:
        redis_key = self._redis_key(key)
        try:
            raw = await self._get_redis().get(redis_key)
        except Exception:
            logger.warning("Redis get failed for key '%s'", redis_key)
            return None
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry '%s'", redis_key)
            return None
        return value if isinstance(value, dict) else None

    async def set(self, key: CacheKey, value: StatusMap, ttl: int) -> None:
        redis_key = self._redis_key(key)
        try:
            await self._get_redis().setex(redis_key, ttl, json.dumps(value))
        except Exception:
            logger.warning("Redis set failed for key '%s'", redis_key)

    async def aclose(self) -> None:
        """Close the underlying Redis connection pool, if one was opened."""
        if self._redis is not None:
            await self._redis.aclose()
