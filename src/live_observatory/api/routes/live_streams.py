"""Route handler for the public live listing.

``GET /live-streams`` returns the ranked records with camelCase keys.  The
handler never fails because of a provider: an outage shows up as fewer
live entries, never as an HTTP error.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from live_observatory.api.dependencies import get_live_stream_service
from live_observatory.core.schemas.live import LiveStatusRecord
from live_observatory.live.service import LiveStreamService

router = APIRouter(tags=["live-streams"])


@router.get("/live-streams", response_model=list[LiveStatusRecord])
async def list_live_streams(
    service: LiveStreamService = Depends(get_live_stream_service),
) -> list[LiveStatusRecord]:
    """Live creators first (by audience), then featured creators."""
    return await service.get_live_streams()
