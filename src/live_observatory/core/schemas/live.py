"""Output schema of the live listing."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Platform(str, Enum):
    """Where a live record's stream is happening."""

    VIDEO = "video"
    SPACE = "space"


class LiveStatusRecord(BaseModel):
    """One entry of the ranked live listing.

    Serialised with camelCase keys (``isLive``, ``viewerCount``, ...).

    Live records carry a ``platform`` and, when the upstream supplied them,
    a title and URL.  Featured (non-live) records have ``platform=None``,
    ``viewer_count=0`` and no ``started_at``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    path: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    platform: Optional[Platform] = None
    is_live: bool = False
    stream_title: Optional[str] = None
    viewer_count: Optional[int] = 0
    stream_url: Optional[str] = None
    started_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
