"""Core domain entities for local files, catalog records and comparisons."""

from .comparison import (
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    classify_difference,
)
from .track import (
    CatalogAlbum,
    CatalogArtist,
    CatalogTrack,
    LocalTrack,
    format_duration,
    round_to_nearest_second,
)

__all__ = [
    "CatalogAlbum",
    "CatalogArtist",
    "CatalogTrack",
    "ComparisonReport",
    "ComparisonResult",
    "ComparisonStatus",
    "LocalTrack",
    "classify_difference",
    "format_duration",
    "round_to_nearest_second",
]
