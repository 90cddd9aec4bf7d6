"""Profile stores consumed by the live aggregator.

The aggregator depends only on :class:`ProfileStore`: one ``list_all`` call
per aggregation, no caching of profile data.  Two implementations ship:

- :class:`InMemoryProfileStore` — a fixed list, used when no database is
  configured and throughout the tests.
- :class:`SqlAlchemyProfileStore` — reads the ``creator_profiles`` table
  through an async session factory.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from live_observatory.core.models.profiles import CreatorProfile
from live_observatory.core.schemas.profile import Profile


class ProfileStore(Protocol):
    """Read-only source of candidate profiles."""

    async def list_all(self, limit: int) -> Sequence[Profile]: ...


class InMemoryProfileStore:
    """Serves a fixed list of profiles in insertion order."""

    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._profiles = list(profiles)

    async def list_all(self, limit: int) -> Sequence[Profile]:
        return list(self._profiles[:limit])


class SqlAlchemyProfileStore:
    """Reads creator profiles ordered by primary key.

    Args:
        session_factory: Async session factory from
            :func:`~live_observatory.core.database.build_session_factory`.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_all(self, limit: int) -> Sequence[Profile]:
        stmt = sa.select(CreatorProfile).order_by(CreatorProfile.id).limit(limit)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [Profile.model_validate(row) for row in rows]
