"""Pydantic schemas shared across the package."""

from live_observatory.core.schemas.live import LiveStatusRecord, Platform
from live_observatory.core.schemas.profile import Profile

__all__ = ["LiveStatusRecord", "Platform", "Profile"]
