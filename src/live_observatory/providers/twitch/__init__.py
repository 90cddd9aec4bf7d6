"""Twitch Helix live-stream status client."""

from live_observatory.providers.twitch.client import TwitchStreamsClient

__all__ = ["TwitchStreamsClient"]
