"""Live Observatory: live-status aggregation for creator profiles."""

__version__ = "0.1.0"
