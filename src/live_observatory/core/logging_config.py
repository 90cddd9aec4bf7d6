"""Structured logging configuration using structlog.

Call ``configure_logging()`` once at application startup (``create_app``
does this).  Modules then log either through the stdlib API, which the
provider clients use::

    import logging
    logger = logging.getLogger(__name__)
    logger.warning("twitch: credentials not configured")

or through structlog when they want bound context, as the API layer does::

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("live_streams_listed", live=3, featured=12)

Both paths end in the same renderer: newline-delimited JSON in production,
coloured console output when the level is ``DEBUG``.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
"""Per-request ID set by the HTTP middleware and copied into every record."""


_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "secret",
    "token",
    "bearer",
    "authorization",
    "password",
    "api_key",
    "client_secret",
})
"""Lower-cased substrings marking event-dict keys whose values are redacted."""


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace values of secret-bearing keys with ``"[REDACTED]"``.

    Top-level keys and one level of nested dicts (e.g. ``headers={...}``) are
    checked, case-insensitively.  The ``event`` key itself is never touched.
    """
    redacted = "[REDACTED]"
    for key in list(event_dict.keys()):
        if key == "event":
            continue
        if any(secret in key.lower() for secret in _SECRET_SUBSTRINGS):
            event_dict[key] = redacted
            continue
        val = event_dict[key]
        if isinstance(val, dict):
            event_dict[key] = {
                nested_key: (
                    redacted
                    if any(s in str(nested_key).lower() for s in _SECRET_SUBSTRINGS)
                    else nested_val
                )
                for nested_key, nested_val in val.items()
            }
    return event_dict


def _inject_request_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add ``request_id`` from :data:`request_id_var` when one is set."""
    rid = request_id_var.get()
    if rid is not None and "request_id" not in event_dict:
        event_dict["request_id"] = rid
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging and structlog through one JSON/console renderer.

    Every record carries ``timestamp`` (ISO 8601), ``level`` (lowercase),
    ``logger`` and ``event``, plus ``request_id`` inside an HTTP request.
    Safe to call repeatedly: the root handler is replaced, not duplicated.

    Args:
        log_level: ``"DEBUG"``, ``"INFO"``, ``"WARNING"``, ``"ERROR"`` or
            ``"CRITICAL"``.  Case-insensitive; unknown values fall back to INFO.
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_request_id,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        final_renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(
            colors=True,
        )
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    # httpx logs every request at INFO; keep it quiet outside DEBUG.
    if not is_development:
        for noisy_logger in ("uvicorn.access", "httpx", "httpcore"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
