"""Shared pytest fixtures for Live Observatory tests.

Fixture summary
---------------
clock           — Controllable time source injected into caches, token
                  managers and providers.
cache           — Fresh InMemoryResultCache bound to ``clock``.
make_profile    — Factory for Profile objects with sensible defaults.
settings        — Settings with both providers configured and fixed URLs.

Nothing here needs a network, database or Redis instance.  Outbound HTTP is
mocked with respx in the individual test modules.
"""

from __future__ import annotations

from typing import Any

import pytest

from live_observatory.config.settings import Settings
from live_observatory.core.cache import InMemoryResultCache
from live_observatory.core.schemas.profile import Profile

TWITCH_TOKEN_URL = "https://id.twitch.test/oauth2/token"
TWITCH_API_BASE = "https://api.twitch.test/helix"
TWITCH_STREAMS_URL = f"{TWITCH_API_BASE}/streams"
X_API_BASE = "https://api.x.test/2"
X_USERS_BY_URL = f"{X_API_BASE}/users/by"
X_SPACES_URL = f"{X_API_BASE}/spaces/by/creator_ids"


class FakeClock:
    """Callable clock returning a settable epoch time."""

    def __init__(self, now: float = 1_760_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    # Aligned to a 15-minute boundary so bucket arithmetic in tests is exact.
    return FakeClock(now=1_760_000_400.0)


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryResultCache:
    return InMemoryResultCache(clock=clock)


@pytest.fixture
def make_profile():
    """Return a factory building Profile objects; ``id`` auto-increments."""
    counter = {"next": 1}

    def _make(**overrides: Any) -> Profile:
        pid = overrides.pop("id", counter["next"])
        counter["next"] = pid + 1
        fields: dict[str, Any] = {
            "id": pid,
            "path": f"creator-{pid}",
            "name": f"Creator {pid}",
            "description": f"Description {pid}",
        }
        fields.update(overrides)
        return Profile(**fields)

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        twitch_client_id="test-client-id",
        twitch_client_secret="test-client-secret",
        twitch_token_url=TWITCH_TOKEN_URL,
        twitch_api_base_url=TWITCH_API_BASE,
        x_bearer_token="test-bearer",
        x_api_base_url=X_API_BASE,
        log_level="WARNING",
    )
