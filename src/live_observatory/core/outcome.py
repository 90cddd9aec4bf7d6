"""Internal result type for provider fetches.

Provider clients raise :mod:`~live_observatory.core.exceptions` internally
and fold them into a :class:`ProviderResult` at their boundary, so that the
aggregator can tell "nobody is live" apart from "the provider failed" for
logging and metrics while the public contract stays a plain mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Why a provider contributed nothing.

    Attributes:
        CONFIGURATION_MISSING: A required credential or URL is absent.
        CREDENTIAL_UNAVAILABLE: The token exchange yielded no token.
        UPSTREAM_UNAVAILABLE: Network error, timeout, non-2xx or bad body.
    """

    CONFIGURATION_MISSING = "configuration_missing"
    CREDENTIAL_UNAVAILABLE = "credential_unavailable"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider fetch.

    Attributes:
        statuses: Lowercased handle -> raw upstream payload.  Always empty
            when ``failure`` is set.
        failure: ``None`` on success.
        from_cache: True when ``statuses`` was served by the result cache.
    """

    statuses: dict[str, dict[str, Any]] = field(default_factory=dict)
    failure: FailureKind | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(
        cls, statuses: dict[str, dict[str, Any]], from_cache: bool = False
    ) -> ProviderResult:
        return cls(statuses=statuses, failure=None, from_cache=from_cache)

    @classmethod
    def failed(cls, kind: FailureKind) -> ProviderResult:
        return cls(statuses={}, failure=kind)
