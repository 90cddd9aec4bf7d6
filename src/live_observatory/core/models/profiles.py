"""ORM model for creator profiles.

The table is owned by the profile service; this package only reads it.
Column names mirror the fields of
:class:`~live_observatory.core.schemas.profile.Profile` so rows validate
straight into the schema.
"""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from live_observatory.core.models.base import Base, TimestampMixin


class CreatorProfile(TimestampMixin, Base):
    """A creator page and its platform handles."""

    __tablename__ = "creator_profiles"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(sa.String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(sa.String(1024), nullable=True)
    twitch_username: Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    # Legacy column kept for pages created before twitch_username existed.
    twitch_channel: Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    x_username: Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    search_terms: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CreatorProfile id={self.id} path={self.path!r}>"
