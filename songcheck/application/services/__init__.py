"""Application services orchestrating the domain and connectors."""

from .comparison_service import (
    TrackComparisonService,
    build_not_found_reason,
    describe_error,
)

__all__ = ["TrackComparisonService", "build_not_found_reason", "describe_error"]
