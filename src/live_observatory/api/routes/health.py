"""Health check route handlers.

``GET /api/health``
    Liveness plus a per-provider breakdown.  Always HTTP 200; ``status`` is
    ``"ok"`` when every configured provider answered, ``"degraded"``
    otherwise.  Unconfigured providers do not degrade the status.

These endpoints are diagnostic — they must never raise HTTP 5xx errors.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from live_observatory.api.dependencies import get_live_stream_service
from live_observatory.live.service import LiveStreamService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/api/health")
async def health(
    service: LiveStreamService = Depends(get_live_stream_service),
) -> dict:
    try:
        providers = await service.health()
    except Exception:
        logger.exception("Health check: provider checks failed")
        return {"status": "degraded", "providers": []}
    degraded = any(p.get("status") == "down" for p in providers)
    return {"status": "degraded" if degraded else "ok", "providers": providers}
