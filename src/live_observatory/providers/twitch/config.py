"""Constants for the Twitch provider.

URLs are not defined here; they come from
:class:`~live_observatory.config.settings.Settings` so that tests and
staging environments can point the client elsewhere.
"""

from __future__ import annotations

PROVIDER_NAME: str = "twitch"

STREAMS_ENDPOINT: str = "/streams"
"""Helix endpoint returning the live streams of the requested logins."""

STREAMS_BATCH_SIZE: int = 100
"""Maximum ``user_login`` values per ``GET /streams`` request (Twitch maximum)."""

CACHE_NAMESPACE: str = "twitch_streams"

CACHE_BUCKET_SECONDS: int = 120
"""Two-minute cache bucket; also the cache entry TTL."""
