"""Creator profile as supplied by the profile store.

The live engine only reads profiles; it never writes them back.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Profile(BaseModel):
    """A creator page with optional platform handles.

    Attributes:
        id: Primary key in the profile store.
        path: URL slug of the creator page.
        name: Display name.
        description: Free-text description.
        logo_url: Logo image URL, if any.
        twitch_username: Primary Twitch login.
        twitch_channel: Legacy Twitch channel field, used when
            ``twitch_username`` is empty.
        x_username: X handle (without ``@``).
        search_terms: Comma-separated tag string.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    path: str
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    twitch_username: Optional[str] = None
    twitch_channel: Optional[str] = None
    x_username: Optional[str] = None
    search_terms: Optional[str] = None

    @property
    def tags(self) -> list[str]:
        """Tags parsed from ``search_terms``: split on commas, trimmed, empties dropped."""
        if not self.search_terms:
            return []
        return [t.strip() for t in self.search_terms.split(",") if t.strip()]
