"""songcheck domain layer - entities, matching logic and exceptions without I/O."""

from . import entities, matching

from .entities import (
    CatalogTrack,
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    LocalTrack,
)
from .matching import MatchEngine, MatchEvidence, MatchResult

__all__ = [
    "CatalogTrack",
    "ComparisonReport",
    "ComparisonResult",
    "ComparisonStatus",
    "LocalTrack",
    "MatchEngine",
    "MatchEvidence",
    "MatchResult",
    "entities",
    "matching",
]
