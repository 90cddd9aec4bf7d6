"""Constants for the X Spaces provider.

The bearer token and base URL come from
:class:`~live_observatory.config.settings.Settings`.
"""

from __future__ import annotations

PROVIDER_NAME: str = "x_spaces"

USERS_BY_ENDPOINT: str = "/users/by"
"""User lookup by comma-separated ``usernames``."""

SPACES_BY_CREATOR_ENDPOINT: str = "/spaces/by/creator_ids"
"""Spaces created by the given ``user_ids``."""

USERS_LOOKUP_BATCH_SIZE: int = 100
"""Maximum usernames per ``GET /users/by`` request (X API v2 maximum)."""

SPACE_FIELDS: str = (
    "id,state,title,participant_count,started_at,scheduled_start,host_ids,speaker_ids"
)
"""``space.fields`` requested from the Spaces endpoint."""

LIVE_STATE: str = "live"

HEALTH_CHECK_USERNAME: str = "XDevelopers"
"""Account looked up by the health check."""

CACHE_NAMESPACE: str = "x_spaces"

CACHE_BUCKET_SECONDS: int = 900
"""Fifteen-minute cache bucket; also the cache entry TTL.

Longer than Twitch's because the X API rate limits are far tighter.
"""
