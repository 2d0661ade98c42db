"""Pure algorithms for scoring catalog candidates against local track metadata.

These functions implement the matching business logic: a composite of title,
artist and album agreement, with separate strategies for Latin and CJK text.
They perform no I/O; caching of matched tracks is done by the catalog client.
"""

from collections.abc import Iterable
from typing import Any

from songcheck.config import get_logger
from songcheck.domain.entities.track import CatalogTrack
from songcheck.domain.exceptions import MalformedCandidateError

from .normalization import (
    has_cjk,
    has_featuring_marker,
    has_trailing_number,
    normalize,
    split_featuring,
    strip_trailing_number,
)
from .similarity import compare_with_featuring, similarity
from .types import MatchEvidence, MatchResult

logger = get_logger(__name__)

# Matching configuration
MATCH_CONFIG = {
    # Composite weights
    "name_weight": 0.55,
    "artist_weight": 0.25,
    "album_weight": 0.20,
    # Title variation weights
    "raw_variation_weight": 1.0,
    "normalized_variation_weight": 0.9,
    "stripped_number_variation_weight": 0.85,
    # Artist
    "featured_artist_floor": 0.9,
    # Album bonuses
    "album_exact_bonus": 1.0,
    "album_partial_bonus": 0.5,
    "cjk_short_album_length": 2,
    "cjk_short_contains_bonus": 0.7,
    "cjk_char_exact_bonus": 0.25,
    "cjk_char_near_bonus": 0.15,
    "cjk_char_code_tolerance": 100,
    "cjk_char_overlap_bonus": 0.15,
    "cjk_long_similarity_floor": 0.5,
    "cjk_long_bonus": 0.1,
    # Threshold comparison tolerance
    "epsilon": 1e-6,
    # Number of ranked candidates written to the debug log
    "debug_top_n": 3,
}


def score_name(title: str, candidate_name: str) -> float:
    """Best title similarity across raw, normalized and number-stripped variations."""
    if has_featuring_marker(title) or has_featuring_marker(candidate_name):
        return compare_with_featuring(title, candidate_name)

    query_variations = [
        (title, MATCH_CONFIG["raw_variation_weight"]),
        (normalize(title), MATCH_CONFIG["normalized_variation_weight"]),
    ]
    if has_trailing_number(title):
        query_variations.append(
            (strip_trailing_number(title), MATCH_CONFIG["stripped_number_variation_weight"])
        )
    candidate_variations = [
        (candidate_name, MATCH_CONFIG["raw_variation_weight"]),
        (normalize(candidate_name), MATCH_CONFIG["normalized_variation_weight"]),
    ]

    best = 0.0
    for query_name, query_weight in query_variations:
        for name, candidate_weight in candidate_variations:
            best = max(best, similarity(name, query_name) * query_weight * candidate_weight)
    return best


def score_artist(title: str, artist: str, candidate_artists: list[str]) -> float:
    """Artist agreement; 1.0 when the query has no artist to compare."""
    if not artist:
        return 1.0

    query_artist = artist.lower()
    if any(name.lower() == query_artist for name in candidate_artists):
        artist_score = 1.0
    else:
        artist_score = similarity(" ".join(candidate_artists), artist)

    featuring = split_featuring(title)
    if featuring.has_feat and featuring.feat_artist:
        feat_artist = featuring.feat_artist.lower()
        if any(feat_artist in name.lower() for name in candidate_artists):
            artist_score = max(artist_score, MATCH_CONFIG["featured_artist_floor"])

    return artist_score


def score_album(album: str, candidate_album: str, query_has_cjk: bool) -> float:
    """Album bonus in ``[0, 1]``; 0 when either side has no album."""
    normalized_album = normalize(album) if album else ""
    if not candidate_album or not normalized_album:
        return 0.0

    normalized_candidate = normalize(candidate_album)
    logger.trace(f'Album comparison: "{normalized_album}" vs "{normalized_candidate}"')

    if not (query_has_cjk and has_cjk(normalized_album)):
        if normalized_candidate == normalized_album:
            return MATCH_CONFIG["album_exact_bonus"]
        if normalized_album in normalized_candidate or normalized_candidate in normalized_album:
            return MATCH_CONFIG["album_partial_bonus"]
        return 0.0

    if len(normalized_album) > MATCH_CONFIG["cjk_short_album_length"]:
        album_similarity = similarity(normalized_candidate, normalized_album)
        if album_similarity > MATCH_CONFIG["cjk_long_similarity_floor"]:
            return MATCH_CONFIG["cjk_long_bonus"] * album_similarity
        return 0.0

    if normalized_candidate == normalized_album:
        return MATCH_CONFIG["album_exact_bonus"]
    if normalized_album in normalized_candidate:
        return MATCH_CONFIG["cjk_short_contains_bonus"]
    if len(normalized_album) == 1:
        return _single_character_album_bonus(
            album.strip(), candidate_album.strip(), normalized_album, normalized_candidate
        )
    return _character_overlap_bonus(normalized_album, normalized_candidate)


def _single_character_album_bonus(
    raw_album: str, raw_candidate: str, normalized_album: str, normalized_candidate: str
) -> float:
    """Single-character CJK album titles, compared on their raw code points."""
    if raw_candidate == raw_album:
        return MATCH_CONFIG["album_exact_bonus"]

    bonus = 0.0
    album_code = ord(raw_album[0])
    tolerance = MATCH_CONFIG["cjk_char_code_tolerance"]
    for char in raw_candidate:
        code_diff = abs(ord(char) - album_code)
        if code_diff == 0:
            bonus = MATCH_CONFIG["cjk_char_exact_bonus"]
            break
        if code_diff < tolerance:
            bonus = MATCH_CONFIG["cjk_char_near_bonus"] * (1 - code_diff / tolerance)
            break

    if bonus == 0:
        bonus = _character_overlap_bonus(normalized_album, normalized_candidate)
    return bonus


def _character_overlap_bonus(normalized_album: str, normalized_candidate: str) -> float:
    matched = sum(1 for char in normalized_album if char in normalized_candidate)
    return MATCH_CONFIG["cjk_char_overlap_bonus"] * matched / len(normalized_album)


def score_candidate(
    candidate: CatalogTrack,
    title: str,
    artist: str = "",
    album: str = "",
    query_has_cjk: bool | None = None,
) -> MatchEvidence:
    """Composite score of one candidate against the query."""
    if query_has_cjk is None:
        query_has_cjk = has_cjk(title + artist + album)

    name_score = score_name(title, candidate.name)
    artist_score = score_artist(title, artist, candidate.artist_names)
    album_bonus = score_album(album, candidate.album_name, query_has_cjk)

    score = (
        name_score * MATCH_CONFIG["name_weight"]
        + artist_score * MATCH_CONFIG["artist_weight"]
        + album_bonus * MATCH_CONFIG["album_weight"]
    )
    return MatchEvidence(
        track=candidate,
        name_score=name_score,
        artist_score=artist_score,
        album_bonus=album_bonus,
        score=score,
    )


def select_best_match(scored: Iterable[MatchEvidence], threshold: float) -> MatchResult:
    """Pick the highest score; earlier candidates win ties.

    Returns a result without a track when the best score is below
    ``threshold`` (with ``epsilon`` tolerance) or nothing was scored.
    """
    best: MatchEvidence | None = None
    for evidence in scored:
        if best is None or evidence.score > best.score:
            best = evidence

    if best is None or best.score + MATCH_CONFIG["epsilon"] < threshold:
        return MatchResult.no_match(best)
    return MatchResult(track=best.track, score=best.score, evidence=best)


def rank_evidence(scored: Iterable[MatchEvidence]) -> list[MatchEvidence]:
    """Highest score first; equal scores keep their catalog order."""
    return sorted(scored, key=lambda evidence: evidence.score, reverse=True)


class MatchEngine:
    """Selects the catalog candidate that best matches local track metadata."""

    def __init__(self, threshold: float = 0.7) -> None:
        self.threshold = threshold

    def find_best_match(
        self,
        candidates: Iterable[CatalogTrack | dict[str, Any]],
        title: str,
        artist: str = "",
        album: str = "",
    ) -> CatalogTrack | None:
        """Best candidate at or above the threshold, or None."""
        return self.evaluate(candidates, title, artist, album).track

    def evaluate(
        self,
        candidates: Iterable[CatalogTrack | dict[str, Any]],
        title: str,
        artist: str = "",
        album: str = "",
    ) -> MatchResult:
        """Score every candidate and select the best one."""
        scored = self._score_all(candidates, title, artist or "", album or "")
        if not scored:
            return MatchResult(track=None)

        self._log_top_candidates(scored, title)
        result = select_best_match(scored, self.threshold)

        if result.track is None:
            logger.info(
                f'Best match for "{title}" has score {result.score:.2f}, '
                f"but below threshold {self.threshold}"
            )
        else:
            logger.info(
                f'Best match for "{title}" is "{result.track.name}" by '
                f"{', '.join(result.track.artist_names)} with score: {result.score:.2f}"
            )
        return result

    def _score_all(
        self,
        candidates: Iterable[CatalogTrack | dict[str, Any]],
        title: str,
        artist: str,
        album: str,
    ) -> list[MatchEvidence]:
        candidates = list(candidates or [])
        if not candidates:
            return []

        query_has_cjk = has_cjk(title + artist + album)
        logger.debug(
            f"Comparing {len(candidates)} tracks with query: {title} - {artist} "
            f"({album or 'No album'}), CJK: {query_has_cjk}"
        )

        scored: list[MatchEvidence] = []
        for candidate in candidates:
            try:
                track = (
                    candidate
                    if isinstance(candidate, CatalogTrack)
                    else CatalogTrack.from_api(candidate)
                )
                evidence = score_candidate(track, title, artist, album, query_has_cjk)
            except (MalformedCandidateError, AttributeError, TypeError) as e:
                logger.warning(f"Skipping malformed candidate: {e}")
                continue

            logger.trace(
                f'Match score for "{track.name}" by {", ".join(track.artist_names)} '
                f"[{track.album_name or 'Unknown'}]: {evidence.score:.2f}"
            )
            scored.append(evidence)
        return scored

    def _log_top_candidates(self, scored: list[MatchEvidence], title: str) -> None:
        ranked = rank_evidence(scored)
        logger.debug(f'--- Detailed matching results for "{title}" ---')
        for index, evidence in enumerate(ranked[: MATCH_CONFIG["debug_top_n"]], start=1):
            details = evidence.as_dict()
            logger.debug(
                f'{index}. "{details["name"]}" by {details["artists"]} '
                f"[{details['album']}]: {evidence.score:.2f}"
            )
            logger.debug(
                f"   Name: {evidence.name_score:.2f}, Artist: {evidence.artist_score:.2f}, "
                f"Album: {evidence.album_bonus:.2f}"
            )
