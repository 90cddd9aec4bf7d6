"""FastAPI application factory and entry point.

Usage::

    uvicorn live_observatory.api.main:app --reload
"""

from __future__ import annotations

import time
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from live_observatory import __version__
from live_observatory.config.settings import Settings, get_settings
from live_observatory.core.database import build_engine, build_session_factory
from live_observatory.core.logging_config import configure_logging, request_id_var
from live_observatory.live.service import build_live_stream_service
from live_observatory.profiles.store import (
    InMemoryProfileStore,
    ProfileStore,
    SqlAlchemyProfileStore,
)

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    profile_store: ProfileStore | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        settings: Settings override; defaults to :func:`get_settings`.
        profile_store: Profile store override.  By default a SQLAlchemy store
            is used when ``database_url`` is set, else an empty in-memory one.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = None
    if profile_store is None:
        if settings.database_url:
            engine = build_engine(settings.database_url)
            profile_store = SqlAlchemyProfileStore(build_session_factory(engine))
        else:
            logger.warning("profile_store_unconfigured", detail="DATABASE_URL not set")
            profile_store = InMemoryProfileStore()

    service = build_live_stream_service(settings, profile_store)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "live_observatory_started",
            twitch_configured=settings.twitch_configured,
            x_configured=settings.x_configured,
            cache_backend=settings.cache_backend,
        )
        yield
        await service.aclose()
        if engine is not None:
            await engine.dispose()

    application = FastAPI(
        title=settings.app_name,
        description="Live status of creator profiles across Twitch and X Spaces.",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.live_stream_service = service

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with a correlation ID, status and duration."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn("request_complete", status_code=status_code, elapsed_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -----------------------------------------------------------

    from live_observatory.api.routes import health, live_streams  # noqa: PLC0415

    application.include_router(live_streams.router)
    application.include_router(health.router)

    if settings.metrics_enabled:
        from live_observatory.core.metrics import get_metrics_response  # noqa: PLC0415

        @application.get("/metrics", include_in_schema=False)
        async def metrics() -> Response:
            body, content_type = get_metrics_response()
            return Response(content=body, media_type=content_type)

    return application


app = create_app()
