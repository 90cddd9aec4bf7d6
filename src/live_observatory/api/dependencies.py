"""FastAPI dependencies.

The live-stream service is built once in
:func:`~live_observatory.api.main.create_app` and kept on ``app.state`` so
that the token manager and result cache are shared by every request.
Tests replace it with ``app.dependency_overrides[get_live_stream_service]``.
"""

from __future__ import annotations

from fastapi import Request

from live_observatory.live.service import LiveStreamService


def get_live_stream_service(request: Request) -> LiveStreamService:
    return request.app.state.live_stream_service
