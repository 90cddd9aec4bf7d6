"""Configuration package for Live Observatory.

Re-exports the settings symbols so that callers can write::

    from live_observatory.config import get_settings
"""

from __future__ import annotations

from live_observatory.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
