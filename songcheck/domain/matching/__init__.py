"""Track matching algorithms and types for local-to-catalog identification."""

from .algorithms import (
    MATCH_CONFIG,
    MatchEngine,
    rank_evidence,
    score_album,
    score_artist,
    score_candidate,
    score_name,
    select_best_match,
)
from .normalization import (
    FeaturingSplit,
    clean_query_text,
    clear_normalization_cache,
    has_cjk,
    has_featuring_marker,
    has_trailing_number,
    normalize,
    split_featuring,
    strip_trailing_number,
)
from .similarity import clear_similarity_cache, compare_with_featuring, similarity
from .types import MatchEvidence, MatchResult


def clear_matching_caches() -> None:
    """Drop memoized normalization and similarity results."""
    clear_normalization_cache()
    clear_similarity_cache()


__all__ = [
    "MATCH_CONFIG",
    "FeaturingSplit",
    "MatchEngine",
    "MatchEvidence",
    "MatchResult",
    "clean_query_text",
    "clear_matching_caches",
    "clear_normalization_cache",
    "clear_similarity_cache",
    "compare_with_featuring",
    "has_cjk",
    "has_featuring_marker",
    "has_trailing_number",
    "normalize",
    "rank_evidence",
    "score_album",
    "score_artist",
    "score_candidate",
    "score_name",
    "select_best_match",
    "similarity",
    "split_featuring",
    "strip_trailing_number",
]
