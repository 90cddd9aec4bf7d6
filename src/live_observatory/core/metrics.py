"""Prometheus metrics for Live Observatory.

All metrics are module-level singletons registered on the default
``REGISTRY``.

Metrics defined here:

  provider_fetch_total{provider, outcome}
      Counter — provider fetches by outcome: ``ok``, ``cached``, or a
      :class:`~live_observatory.core.outcome.FailureKind` value.

  result_cache_lookups_total{provider, result}
      Counter — result cache reads, ``hit`` or ``miss``.

  live_streams_listed{state}
      Gauge — size of the most recent listing, split into ``live`` and
      ``featured`` records.

Usage::

    from live_observatory.core.metrics import provider_fetch_total
    provider_fetch_total.labels(provider="twitch", outcome="ok").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

provider_fetch_total: Counter = Counter(
    "provider_fetch_total",
    "Provider live-status fetches by provider and outcome.",
    labelnames=["provider", "outcome"],
)

result_cache_lookups_total: Counter = Counter(
    "result_cache_lookups_total",
    "Result cache lookups by provider and hit/miss.",
    labelnames=["provider", "result"],
)

live_streams_listed: Gauge = Gauge(
    "live_streams_listed",
    "Records in the most recent live listing by state.",
    labelnames=["state"],
)


def get_metrics_response() -> tuple[bytes, str]:
    """Generate a Prometheus text-format metrics response.

    Returns:
        A tuple of (body_bytes, content_type_string) suitable for constructing
        a FastAPI ``Response`` object.
    """
    from prometheus_client import CONTENT_TYPE_LATEST, generate_latest  # noqa: PLC0415

    return generate_latest(), CONTENT_TYPE_LATEST
