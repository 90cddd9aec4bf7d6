"""Live-status aggregation."""

from live_observatory.live.aggregator import LiveStreamAggregator
from live_observatory.live.service import build_live_stream_service

__all__ = ["LiveStreamAggregator", "build_live_stream_service"]
