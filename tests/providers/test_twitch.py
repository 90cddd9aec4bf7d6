"""Tests for the Twitch live-stream provider.

Covers:
- streams are requested with repeated ``user_login`` params and auth headers
- logins are batched at 100 per request
- results are keyed by lowercased login
- results are cached per two-minute bucket; a new bucket refetches
- no token -> no streams request, empty result, nothing cached
- HTTP errors and connection errors -> empty result, nothing cached
- a 401 drops the cached token
- health_check() reports ok / down / not_configured

These tests use respx to mock HTTP calls.  No real network traffic is made.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import respx

from live_observatory.core.outcome import FailureKind
from live_observatory.core.token_manager import AppTokenManager
from live_observatory.providers.twitch.client import TwitchStreamsClient

TOKEN_URL = "https://id.twitch.test/oauth2/token"
API_BASE = "https://api.twitch.test/helix"
STREAMS_URL = f"{API_BASE}/streams"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(clock, cache, client_id: str | None = "cid", client_secret: str | None = "secret") -> TwitchStreamsClient:
    tokens = AppTokenManager(
        client_id=client_id,
        client_secret=client_secret,
        token_url=TOKEN_URL,
        clock=clock,
    )
    return TwitchStreamsClient(
        token_manager=tokens,
        client_id=client_id,
        api_base_url=API_BASE,
        cache=cache,
        clock=clock,
    )


def _mock_token(token: str = "app-token") -> respx.Route:
    return respx.post(TOKEN_URL).mock(
        return_value=httpx.Response(200, json={"access_token": token, "expires_in": 5_000_000})
    )


def _stream(login: str, viewers: int = 10) -> dict[str, Any]:
    return {
        "id": f"s-{login}",
        "user_login": login,
        "user_name": login,
        "type": "live",
        "title": f"{login} live",
        "viewer_count": viewers,
        "started_at": "2026-10-17T18:00:00Z",
    }


def _streams_response(*streams: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json={"data": list(streams), "pagination": {}})


# ---------------------------------------------------------------------------
# fetch_live_status()
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_requests_streams_with_logins_and_auth_headers(clock, cache) -> None:
    _mock_token("app-token")
    route = respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("foo")))

    await _client(clock, cache).fetch_live_status({"foo", "bar"})

    request = route.calls.last.request
    assert sorted(request.url.params.get_list("user_login")) == ["bar", "foo"]
    assert request.headers["Client-ID"] == "cid"
    assert request.headers["Authorization"] == "Bearer app-token"


@pytest.mark.asyncio
@respx.mock
async def test_only_live_logins_returned_keyed_lowercase(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("Alice", viewers=99)))

    result = await _client(clock, cache).fetch_live_status({"Alice", "bob"})

    assert set(result) == {"alice"}
    assert result["alice"]["viewer_count"] == 99


@pytest.mark.asyncio
@respx.mock
async def test_batches_of_one_hundred_logins(clock, cache) -> None:
    _mock_token()
    route = respx.get(STREAMS_URL).mock(
        side_effect=[_streams_response(_stream("user000")), _streams_response(_stream("user149"))]
    )
    handles = {f"user{i:03d}" for i in range(150)}

    result = await _client(clock, cache).fetch_live_status(handles)

    assert route.call_count == 2
    sizes = [len(call.request.url.params.get_list("user_login")) for call in route.calls]
    assert sizes == [100, 50]
    queried = {login for call in route.calls for login in call.request.url.params.get_list("user_login")}
    assert queried == handles
    assert set(result) == {"user000", "user149"}


@pytest.mark.asyncio
@respx.mock
async def test_empty_handle_set_makes_no_requests(clock, cache) -> None:
    token_route = _mock_token()
    streams_route = respx.get(STREAMS_URL).mock(return_value=_streams_response())

    assert await _client(clock, cache).fetch_live_status(set()) == {}
    assert token_route.call_count == 0
    assert streams_route.call_count == 0


# ---------------------------------------------------------------------------
# Result cache
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_same_bucket_served_from_cache(clock, cache) -> None:
    _mock_token()
    route = respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("foo")))
    client = _client(clock, cache)

    first = await client.fetch_live_status({"foo", "bar"})
    clock.advance(119)
    second = await client.fetch(["BAR", "Foo", "foo"])

    assert route.call_count == 1
    assert second.from_cache is True
    assert second.statuses == first


@pytest.mark.asyncio
@respx.mock
async def test_next_bucket_refetches(clock, cache) -> None:
    token_route = _mock_token()
    route = respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("foo")))
    client = _client(clock, cache)

    await client.fetch_live_status({"foo"})
    clock.advance(120)
    await client.fetch_live_status({"foo"})

    assert route.call_count == 2
    assert token_route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_different_handle_sets_use_separate_entries(clock, cache) -> None:
    _mock_token()
    route = respx.get(STREAMS_URL).mock(return_value=_streams_response())
    client = _client(clock, cache)

    await client.fetch_live_status({"foo"})
    await client.fetch_live_status({"foo", "bar"})

    assert route.call_count == 2


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_no_token_skips_streams_request(clock, cache) -> None:
    respx.post(TOKEN_URL).mock(return_value=httpx.Response(400, json={"message": "invalid client"}))
    streams_route = respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("foo")))

    result = await _client(clock, cache).fetch({"foo"})

    assert result.statuses == {}
    assert result.failure is FailureKind.CREDENTIAL_UNAVAILABLE
    assert streams_route.call_count == 0
    assert len(cache) == 0


@pytest.mark.asyncio
@respx.mock
async def test_missing_credentials_not_configured(clock, cache) -> None:
    token_route = _mock_token()

    result = await _client(clock, cache, client_id=None).fetch({"foo"})

    assert result.failure is FailureKind.CONFIGURATION_MISSING
    assert token_route.call_count == 0


@pytest.mark.asyncio
@respx.mock
async def test_server_error_returns_empty_and_is_not_cached(clock, cache) -> None:
    _mock_token()
    route = respx.get(STREAMS_URL).mock(
        side_effect=[httpx.Response(500), _streams_response(_stream("foo"))]
    )
    client = _client(clock, cache)

    failed = await client.fetch({"foo"})
    recovered = await client.fetch({"foo"})

    assert failed.failure is FailureKind.UPSTREAM_UNAVAILABLE
    assert failed.statuses == {}
    assert set(recovered.statuses) == {"foo"}
    assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_connection_error_returns_empty(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    assert await _client(clock, cache).fetch_live_status({"foo"}) == {}
    assert len(cache) == 0


@pytest.mark.asyncio
@respx.mock
async def test_failed_batch_fails_whole_fetch(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(
        side_effect=[_streams_response(_stream("user000")), httpx.Response(503)]
    )

    result = await _client(clock, cache).fetch({f"user{i:03d}" for i in range(150)})

    assert result.statuses == {}
    assert result.failure is FailureKind.UPSTREAM_UNAVAILABLE


@pytest.mark.asyncio
@respx.mock
async def test_rate_limited_returns_empty(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(return_value=httpx.Response(429, headers={"Retry-After": "30"}))

    result = await _client(clock, cache).fetch({"foo"})

    assert result.failure is FailureKind.UPSTREAM_UNAVAILABLE


@pytest.mark.asyncio
@respx.mock
async def test_unauthorized_drops_cached_token(clock, cache) -> None:
    token_route = respx.post(TOKEN_URL).mock(
        side_effect=[
            httpx.Response(200, json={"access_token": "stale", "expires_in": 5_000_000}),
            httpx.Response(200, json={"access_token": "fresh", "expires_in": 5_000_000}),
        ]
    )
    streams_route = respx.get(STREAMS_URL).mock(
        side_effect=[httpx.Response(401), _streams_response(_stream("foo"))]
    )
    client = _client(clock, cache)

    assert await client.fetch_live_status({"foo"}) == {}
    result = await client.fetch_live_status({"foo"})

    assert set(result) == {"foo"}
    assert token_route.call_count == 2
    assert streams_route.calls.last.request.headers["Authorization"] == "Bearer fresh"


@pytest.mark.asyncio
@respx.mock
async def test_non_json_body_returns_empty(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(return_value=httpx.Response(200, text="<html>maintenance</html>"))

    assert await _client(clock, cache).fetch_live_status({"foo"}) == {}


# ---------------------------------------------------------------------------
# health_check()
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@respx.mock
async def test_health_check_ok(clock, cache) -> None:
    _mock_token()
    route = respx.get(STREAMS_URL).mock(return_value=_streams_response(_stream("foo")))

    health = await _client(clock, cache).health_check()

    assert health["provider"] == "twitch"
    assert health["status"] == "ok"
    assert route.calls.last.request.url.params["first"] == "1"


@pytest.mark.asyncio
@respx.mock
async def test_health_check_down_on_http_error(clock, cache) -> None:
    _mock_token()
    respx.get(STREAMS_URL).mock(return_value=httpx.Response(503))

    health = await _client(clock, cache).health_check()

    assert health["status"] == "down"
    assert "503" in health["detail"]


@pytest.mark.asyncio
async def test_health_check_not_configured(clock, cache) -> None:
    health = await _client(clock, cache, client_secret=None).health_check()

    assert health["status"] == "not_configured"
