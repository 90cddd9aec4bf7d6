"""Application-wide exception hierarchy for Live Observatory.

All custom exceptions subclass ``LiveObservatoryError``.  They are raised
inside provider clients and converted to degraded empty results at each
client's public boundary; none of them ever reaches the caller of
:meth:`~live_observatory.live.aggregator.LiveStreamAggregator.get_live_streams`.

Hierarchy::

    LiveObservatoryError
    ├── ConfigurationMissingError
    ├── CredentialUnavailableError
    └── UpstreamUnavailableError     (status_code: int | None)
        └── UpstreamRateLimitError   (retry_after: float)
"""

from __future__ import annotations


class LiveObservatoryError(Exception):
    """Base class for all Live Observatory exceptions."""


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ConfigurationMissingError(LiveObservatoryError):
    """Raised when a provider's required credential or URL is not configured.

    Args:
        provider: Provider identifier (e.g. ``"twitch"``).
        setting: Name of the missing setting, when a single one is at fault.
    """

    def __init__(self, provider: str, setting: str | None = None) -> None:
        msg = f"Provider '{provider}' is not configured"
        if setting:
            msg += f" (missing '{setting}')"
        super().__init__(msg)
        self.provider = provider
        self.setting = setting


class CredentialUnavailableError(LiveObservatoryError):
    """Raised when a configured provider could not obtain an access token.

    The token manager has already logged the underlying cause, so this is
    treated as "feature unavailable" rather than an upstream error.
    """

    def __init__(self, provider: str) -> None:
        super().__init__(f"No access token available for provider '{provider}'")
        self.provider = provider


class UpstreamUnavailableError(LiveObservatoryError):
    """Raised on network errors, timeouts, non-2xx responses or unparseable bodies.

    Args:
        message: Human-readable description of the failure.
        provider: Provider identifier.
        status_code: HTTP status code when the upstream answered at all.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class UpstreamRateLimitError(UpstreamUnavailableError):
    """Raised when an upstream API answers HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds the upstream asked us to wait. Defaults to 60.
        provider: Provider identifier.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        provider: str | None = None,
    ) -> None:
        super().__init__(message, provider=provider, status_code=429)
        self.retry_after = retry_after
