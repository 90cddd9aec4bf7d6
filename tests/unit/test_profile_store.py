"""Tests for the profile stores.

SqlAlchemyProfileStore runs against an in-memory SQLite database through
aiosqlite, so no PostgreSQL instance is required.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from live_observatory.core.database import build_engine, build_session_factory
from live_observatory.core.models import Base, CreatorProfile
from live_observatory.core.schemas.profile import Profile
from live_observatory.profiles.store import InMemoryProfileStore, SqlAlchemyProfileStore


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator:
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


async def _insert(factory, *rows: CreatorProfile) -> None:
    async with factory() as session:
        session.add_all(rows)
        await session.commit()


class TestInMemoryProfileStore:
    @pytest.mark.asyncio
    async def test_returns_profiles_in_order(self, make_profile) -> None:
        profiles = [make_profile(), make_profile(), make_profile()]

        result = await InMemoryProfileStore(profiles).list_all(limit=10)

        assert [p.id for p in result] == [p.id for p in profiles]

    @pytest.mark.asyncio
    async def test_respects_limit(self, make_profile) -> None:
        store = InMemoryProfileStore([make_profile() for _ in range(5)])

        assert len(await store.list_all(limit=2)) == 2


class TestSqlAlchemyProfileStore:
    @pytest.mark.asyncio
    async def test_rows_validate_into_profiles(self, session_factory) -> None:
        await _insert(
            session_factory,
            CreatorProfile(
                id=1,
                path="alice",
                name="Alice",
                logo_url="https://cdn.test/a.png",
                twitch_channel="alice_tv",
                x_username="alice",
                search_terms="art, music",
            ),
        )

        (profile,) = await SqlAlchemyProfileStore(session_factory).list_all(limit=10)

        assert isinstance(profile, Profile)
        assert profile.path == "alice"
        assert profile.twitch_username is None
        assert profile.twitch_channel == "alice_tv"
        assert profile.tags == ["art", "music"]

    @pytest.mark.asyncio
    async def test_ordered_by_id_and_limited(self, session_factory) -> None:
        await _insert(
            session_factory,
            CreatorProfile(id=3, path="c", name="C"),
            CreatorProfile(id=1, path="a", name="A"),
            CreatorProfile(id=2, path="b", name="B"),
        )

        result = await SqlAlchemyProfileStore(session_factory).list_all(limit=2)

        assert [p.id for p in result] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_table(self, session_factory) -> None:
        assert await SqlAlchemyProfileStore(session_factory).list_all(limit=10) == []
