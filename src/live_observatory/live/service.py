"""Assembly of the live-stream service from settings.

One call wires the shared pieces (result cache, Twitch token manager,
both provider clients) into a :class:`LiveStreamAggregator`.  The token
manager and cache live as long as the returned :class:`LiveStreamService`,
so every aggregation call made through it reuses tokens and cached results.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from live_observatory.config.settings import Settings
from live_observatory.core.cache import (
    InMemoryResultCache,
    RedisResultCache,
    ResultCache,
)
from live_observatory.core.schemas.live import LiveStatusRecord
from live_observatory.core.token_manager import AppTokenManager
from live_observatory.live.aggregator import LiveStreamAggregator
from live_observatory.profiles.store import ProfileStore
from live_observatory.providers.twitch.client import TwitchStreamsClient
from live_observatory.providers.x_spaces.client import XSpacesClient


@dataclass
class LiveStreamService:
    """The wired aggregator plus the components it shares across calls."""

    aggregator: LiveStreamAggregator
    twitch: TwitchStreamsClient
    x_spaces: XSpacesClient
    token_manager: AppTokenManager
    cache: ResultCache

    async def get_live_streams(self) -> list[LiveStatusRecord]:
        return await self.aggregator.get_live_streams()

    async def health(self) -> list[dict]:
        return [await self.twitch.health_check(), await self.x_spaces.health_check()]

    async def aclose(self) -> None:
        if isinstance(self.cache, RedisResultCache):
            await self.cache.aclose()


def build_result_cache(settings: Settings) -> ResultCache:
    """Return the cache store selected by ``settings.cache_backend``."""
    if settings.cache_backend == "redis":
        return RedisResultCache(redis_url=settings.redis_url)
    return InMemoryResultCache()


def build_live_stream_service(
    settings: Settings,
    profile_store: ProfileStore,
    cache: ResultCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> LiveStreamService:
    """Wire a :class:`LiveStreamService` from *settings*.

    Args:
        settings: Application settings.
        profile_store: Source of candidate profiles.
        cache: Optional cache override; defaults to :func:`build_result_cache`.
        http_client: Optional shared HTTP client for every outbound call.
    """
    if cache is None:
        cache = build_result_cache(settings)

    token_manager = AppTokenManager(
        client_id=settings.twitch_client_id,
        client_secret=settings.twitch_client_secret,
        token_url=settings.twitch_token_url,
        provider="twitch",
        http_client=http_client,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
    twitch = TwitchStreamsClient(
        token_manager=token_manager,
        client_id=settings.twitch_client_id,
        api_base_url=settings.twitch_api_base_url,
        cache=cache,
        http_client=http_client,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
    x_spaces = XSpacesClient(
        bearer_token=settings.x_bearer_token,
        api_base_url=settings.x_api_base_url,
        cache=cache,
        http_client=http_client,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
    aggregator = LiveStreamAggregator(
        profile_store=profile_store,
        video_provider=twitch,
        space_provider=x_spaces,
        profile_limit=settings.profile_list_limit,
        twitch_web_base_url=settings.twitch_web_base_url,
        x_web_base_url=settings.x_web_base_url,
    )
    return LiveStreamService(
        aggregator=aggregator,
        twitch=twitch,
        x_spaces=x_spaces,
        token_manager=token_manager,
        cache=cache,
    )
