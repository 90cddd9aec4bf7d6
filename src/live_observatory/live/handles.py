"""Which platform handle of a profile the live engine uses.

A profile may carry a Twitch handle in two fields: ``twitch_username`` and
the legacy ``twitch_channel``.  The first non-blank one wins.  Blank or
whitespace-only values count as absent everywhere.
"""

from __future__ import annotations

from live_observatory.core.schemas.profile import Profile


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def video_handle(profile: Profile) -> str | None:
    """Return the profile's Twitch handle: ``twitch_username``, else ``twitch_channel``."""
    return _clean(profile.twitch_username) or _clean(profile.twitch_channel)


def space_handle(profile: Profile) -> str | None:
    """Return the profile's X handle, without a leading ``@``."""
    handle = _clean(profile.x_username)
    if handle is None:
        return None
    return _clean(handle.lstrip("@"))


def has_any_handle(profile: Profile) -> bool:
    return video_handle(profile) is not None or space_handle(profile) is not None
