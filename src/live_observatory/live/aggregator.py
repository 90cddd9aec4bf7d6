"""Live-status aggregation: fetch, merge and rank.

:class:`LiveStreamAggregator` reads the candidate profiles once, polls
Twitch and X Spaces concurrently for the handles they expose, and merges
the answers back onto the profiles:

- a Twitch match makes a live ``video`` record,
- otherwise an X Spaces match makes a live ``space`` record,
- otherwise a profile with any handle becomes a featured (non-live) record,
- a profile with no handle at all is left out.

When a profile is live on both platforms the Twitch stream is shown.  The
result is stably sorted: live records first, then by descending viewer or
participant count, ties in profile order.

``get_live_streams`` never raises.  A provider that is down or not
configured contributes nothing; if both are, every handle-bearing profile
is listed as featured.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from live_observatory.core.metrics import live_streams_listed
from live_observatory.core.outcome import ProviderResult
from live_observatory.core.schemas.live import LiveStatusRecord, Platform
from live_observatory.core.schemas.profile import Profile
from live_observatory.live.handles import has_any_handle, space_handle, video_handle
from live_observatory.profiles.store import ProfileStore
from live_observatory.providers.base import LiveStatusProvider

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_LIMIT: int = 1000
DEFAULT_TWITCH_WEB_BASE_URL: str = "https://twitch.tv"
DEFAULT_X_WEB_BASE_URL: str = "https://twitter.com"


class LiveStreamAggregator:
    """Builds the ranked live listing.

    Args:
        profile_store: Source of candidate profiles.
        video_provider: Twitch client, or ``None`` to disable Twitch.
        space_provider: X Spaces client, or ``None`` to disable X.
        profile_limit: Maximum profiles read per call.
        twitch_web_base_url: Site used for channel URLs.
        x_web_base_url: Site used for profile and space URLs.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        video_provider: LiveStatusProvider | None,
        space_provider: LiveStatusProvider | None,
        profile_limit: int = DEFAULT_PROFILE_LIMIT,
        twitch_web_base_url: str = DEFAULT_TWITCH_WEB_BASE_URL,
        x_web_base_url: str = DEFAULT_X_WEB_BASE_URL,
    ) -> None:
        self._profiles = profile_store
        self._video = video_provider
        self._space = space_provider
        self._profile_limit = profile_limit
        self._twitch_web_base_url = twitch_web_base_url.rstrip("/")
        self._x_web_base_url = x_web_base_url.rstrip("/")

    async def get_live_streams(self) -> list[LiveStatusRecord]:
        """Return the ranked listing, or ``[]`` on any internal failure."""
        try:
            return await self._get_live_streams()
        except Exception:
            logger.exception("Error fetching live streams")
            return []

    async def _get_live_streams(self) -> list[LiveStatusRecord]:
        profiles = await self._profiles.list_all(limit=self._profile_limit)
        if not profiles:
            return []

        video_handles = _collect(video_handle(p) for p in profiles)
        space_handles = _collect(space_handle(p) for p in profiles)

        video_result, space_result = await asyncio.gather(
            _fetch(self._video, video_handles),
            _fetch(self._space, space_handles),
        )
        if video_result.ok != space_result.ok:
            failed = video_result if not video_result.ok else space_result
            logger.warning(
                "Partial live-status failure, continuing with the healthy provider (%s)",
                failed.failure.value if failed.failure else "unknown",
            )

        records = merge_results(
            profiles,
            video_result.statuses,
            space_result.statuses,
            twitch_web_base_url=self._twitch_web_base_url,
            x_web_base_url=self._x_web_base_url,
        )
        ranked = rank_records(records)

        live_count = sum(1 for r in ranked if r.is_live)
        live_streams_listed.labels(state="live").set(live_count)
        live_streams_listed.labels(state="featured").set(len(ranked) - live_count)
        logger.info(
            "Live streams listed: profiles=%d live=%d featured=%d",
            len(profiles),
            live_count,
            len(ranked) - live_count,
        )
        return ranked


# ---------------------------------------------------------------------------
# Merge and rank
# ---------------------------------------------------------------------------


def merge_results(
    profiles: Sequence[Profile],
    video_statuses: dict[str, dict[str, Any]],
    space_statuses: dict[str, dict[str, Any]],
    twitch_web_base_url: str = DEFAULT_TWITCH_WEB_BASE_URL,
    x_web_base_url: str = DEFAULT_X_WEB_BASE_URL,
) -> list[LiveStatusRecord]:
    """Turn profiles plus provider statuses into records, in profile order.

    Profiles without any handle are omitted.
    """
    records: list[LiveStatusRecord] = []
    for profile in profiles:
        twitch = video_handle(profile)
        x = space_handle(profile)

        stream = video_statuses.get(twitch.lower()) if twitch else None
        space = space_statuses.get(x.lower()) if x else None

        if stream is not None:
            login = stream.get("user_login") or twitch
            records.append(
                _record(
                    profile,
                    platform=Platform.VIDEO,
                    is_live=True,
                    stream_title=stream.get("title"),
                    viewer_count=_as_int(stream.get("viewer_count")),
                    stream_url=f"{twitch_web_base_url}/{login}",
                    started_at=_parse_timestamp(stream.get("started_at")),
                )
            )
        elif space is not None:
            space_id = space.get("id")
            records.append(
                _record(
                    profile,
                    platform=Platform.SPACE,
                    is_live=True,
                    stream_title=space.get("title"),
                    viewer_count=_as_int(space.get("participant_count")),
                    stream_url=f"{x_web_base_url}/i/spaces/{space_id}" if space_id else None,
                    started_at=_parse_timestamp(space.get("started_at")),
                )
            )
        elif has_any_handle(profile):
            url = f"{twitch_web_base_url}/{twitch}" if twitch else f"{x_web_base_url}/{x}"
            records.append(
                _record(
                    profile,
                    platform=None,
                    is_live=False,
                    stream_title=None,
                    viewer_count=0,
                    stream_url=url,
                    started_at=None,
                )
            )
    return records


def rank_records(records: Iterable[LiveStatusRecord]) -> list[LiveStatusRecord]:
    """Stable sort: live first, then descending viewer count (missing counts as 0)."""
    return sorted(records, key=lambda r: (not r.is_live, -(r.viewer_count or 0)))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _fetch(provider: LiveStatusProvider | None, handles: set[str]) -> ProviderResult:
    if provider is None or not handles:
        return ProviderResult.success({})
    return await provider.fetch(handles)


def _collect(handles: Iterable[str | None]) -> set[str]:
    return {h for h in handles if h}


def _record(profile: Profile, **fields: Any) -> LiveStatusRecord:
    return LiveStatusRecord(
        id=profile.id,
        path=profile.path,
        name=profile.name,
        description=profile.description,
        logo=profile.logo_url,
        tags=profile.tags,
        **fields,
    )


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 upstream timestamp; ``None`` when absent or malformed."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring malformed timestamp %r", value)
        return None
