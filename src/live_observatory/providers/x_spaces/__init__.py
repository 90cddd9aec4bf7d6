"""X API v2 live Spaces client."""

from live_observatory.providers.x_spaces.client import XSpacesClient

__all__ = ["XSpacesClient"]
