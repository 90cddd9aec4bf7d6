"""Profile storage collaborators."""

from live_observatory.profiles.store import (
    InMemoryProfileStore,
    ProfileStore,
    SqlAlchemyProfileStore,
)

__all__ = ["InMemoryProfileStore", "ProfileStore", "SqlAlchemyProfileStore"]
