"""Tests for candidate scoring and best match selection."""

import pytest

from songcheck.domain.entities import CatalogAlbum, CatalogArtist, CatalogTrack
from songcheck.domain.matching import (
    MatchEngine,
    MatchEvidence,
    rank_evidence,
    score_album,
    score_artist,
    score_name,
    select_best_match,
    similarity,
)


def catalog_track(
    track_id="t1", name="Song", artists=("Artist",), album=None, duration_ms=200_000
):
    return CatalogTrack(
        id=track_id,
        name=name,
        artists=[CatalogArtist(name=artist) for artist in artists],
        album=CatalogAlbum(name=album) if album else None,
        duration_ms=duration_ms,
    )


class TestMatchScenarios:
    """End-to-end matching of realistic queries."""

    def test_exact_title_and_artist_without_album(self):
        """Test an exact title and artist match is accepted at 0.8."""
        candidate = catalog_track(
            "bohemian", "Bohemian Rhapsody", ("Queen",), "A Night at the Opera"
        )
        engine = MatchEngine()

        result = engine.evaluate([candidate], "Bohemian Rhapsody", "Queen")

        assert result.track == candidate
        assert result.evidence.name_score == 1.0
        assert result.evidence.artist_score == 1.0
        assert result.evidence.album_bonus == 0.0
        assert result.score == pytest.approx(0.8)

    def test_trailing_track_number_in_local_title(self):
        """Test 'Song Title 2' still matches 'Song Title'."""
        candidate = catalog_track("t1", "Song Title", ("Band",))

        match = MatchEngine().find_best_match([candidate], "Song Title 2", "Band")

        assert match == candidate

    def test_short_cjk_title_inside_longer_title(self):
        """Test a short CJK title gets partial credit but stays below threshold."""
        candidate = catalog_track("t1", "曖昧な関係", ("歌手",), "曖昧")

        assert similarity("曖昧", "曖昧な関係") == pytest.approx(0.36)
        result = MatchEngine().evaluate([candidate], "曖昧", "歌手", "曖昧")

        assert result.track is None
        assert result.evidence.name_score == pytest.approx(0.36)
        assert result.evidence.album_bonus == 1.0
        assert result.score == pytest.approx(0.55 * 0.36 + 0.25 + 0.2)

    def test_lower_threshold_accepts_partial_cjk_match(self):
        """Test the threshold is configurable."""
        candidate = catalog_track("t1", "曖昧な関係", ("歌手",), "曖昧")

        match = MatchEngine(threshold=0.6).find_best_match([candidate], "曖昧", "歌手", "曖昧")

        assert match == candidate


class TestScoreName:
    """Test title scoring."""

    def test_exact(self):
        """Test identical titles score 1.0."""
        assert score_name("Yesterday", "Yesterday") == 1.0

    def test_featuring_titles_use_featuring_comparison(self):
        """Test titles with feat. compare main title and guest separately."""
        assert score_name("Song (feat. Alice)", "Song (feat. Bob)") == pytest.approx(0.8)

    def test_unrelated(self):
        """Test unrelated titles score low."""
        assert score_name("Yesterday", "Thriller") < 0.3


class TestScoreArtist:
    """Test artist scoring."""

    def test_no_query_artist(self):
        """Test a missing local artist is neutral."""
        assert score_artist("Song", "", ["Anyone"]) == 1.0

    def test_case_insensitive_exact(self):
        """Test exact artist match ignoring case."""
        assert score_artist("Song", "queen", ["Queen"]) == 1.0

    def test_featured_artist_floor(self):
        """Test the featured artist in the title lifts the artist score to 0.9."""
        score = score_artist("Song (feat. Bob)", "Alice", ["Alice X", "Bob"])
        assert score == pytest.approx(0.9)

    def test_similar_artist(self):
        """Test partial artist names fall back to similarity."""
        score = score_artist("Song", "Beatles", ["The Beatles"])
        assert score == pytest.approx(0.9 * 7 / 11)


class TestScoreAlbum:
    """Test album bonus branches."""

    def test_missing_album(self):
        """Test no bonus when either album is missing."""
        assert score_album("", "Album", False) == 0.0
        assert score_album("Album", "", False) == 0.0

    def test_latin_exact_and_partial(self):
        """Test exact and containment bonuses for Latin albums."""
        assert score_album("A Night at the Opera", "A Night At The Opera", False) == 1.0
        assert score_album("Opera", "A Night at the Opera", False) == 0.5
        assert score_album("Thriller", "Bad", False) == 0.0

    def test_cjk_album_without_cjk_query_uses_latin_rules(self):
        """Test CJK rules only apply when the query itself contains CJK."""
        assert score_album("愛", "愛の歌", False) == 0.5

    def test_short_cjk_exact_and_contains(self):
        """Test short CJK albums: exact and contained."""
        assert score_album("愛", "愛", True) == 1.0
        assert score_album("愛", "愛の歌", True) == 0.7

    def test_single_character_code_point_proximity(self):
        """Test a nearby code point earns a scaled bonus."""
        # U+611B vs U+611F
        assert score_album("愛", "感", True) == pytest.approx(0.15 * (1 - 4 / 100))

    def test_two_character_overlap(self):
        """Test shared characters in a two-character album."""
        assert score_album("愛情", "情熱", True) == pytest.approx(0.075)

    def test_long_cjk_album_similarity(self):
        """Test long CJK albums earn a tenth of their similarity above 0.5."""
        bonus = score_album("東京タワー", "東京タワー物語", True)
        assert bonus == pytest.approx(0.1 * 0.9 * 5 / 7)


class TestSelectBestMatch:
    """Test threshold and tie handling."""

    def evidence(self, score, track_id="t1"):
        return MatchEvidence(track=catalog_track(track_id), score=score)

    def test_score_at_threshold_is_accepted(self):
        """Test a score equal to the threshold matches."""
        assert select_best_match([self.evidence(0.7)], 0.7).success

    def test_score_within_epsilon_is_accepted(self):
        """Test scores a hair below the threshold still match."""
        assert select_best_match([self.evidence(0.7 - 1e-7)], 0.7).success

    def test_score_below_threshold_is_rejected(self):
        """Test a clearly lower score does not match."""
        result = select_best_match([self.evidence(0.6999)], 0.7)

        assert not result.success
        assert result.score == pytest.approx(0.6999)

    def test_tie_keeps_first_candidate(self):
        """Test equal scores keep the earlier candidate."""
        scored = [self.evidence(0.9, "first"), self.evidence(0.9, "second")]

        result = select_best_match(scored, 0.7)

        assert result.track.id == "first"

    def test_no_candidates(self):
        """Test an empty input yields no match."""
        result = select_best_match([], 0.7)

        assert result.track is None
        assert result.score == -1.0

    def test_rank_evidence_orders_by_score(self):
        """Test ranking puts the best score first and keeps catalog order on ties."""
        scored = [
            self.evidence(0.5, "weak"),
            self.evidence(0.9, "first"),
            self.evidence(0.9, "second"),
        ]

        ranked = rank_evidence(scored)

        assert [evidence.track.id for evidence in ranked] == ["first", "second", "weak"]


class TestMatchEngine:
    """Test the match engine over raw and typed candidates."""

    def test_empty_candidates(self):
        """Test no candidates gives None."""
        assert MatchEngine().find_best_match([], "Song", "Artist") is None

    def test_malformed_candidates_are_skipped(self):
        """Test records missing required fields are ignored."""
        candidates = [
            {"name": "Bohemian Rhapsody"},
            {"id": "x", "name": "Bohemian Rhapsody", "artists": "Queen"},
            {
                "id": "good",
                "name": "Bohemian Rhapsody",
                "artists": [{"name": "Queen"}],
                "duration_ms": 354_000,
            },
        ]

        match = MatchEngine().find_best_match(candidates, "Bohemian Rhapsody", "Queen")

        assert match is not None
        assert match.id == "good"

    def test_identical_candidates_pick_first(self):
        """Test ties between equal candidates resolve to the first seen."""
        first = catalog_track("first", "Song", ("Artist",))
        second = catalog_track("second", "Song", ("Artist",))

        assert MatchEngine().find_best_match([first, second], "Song", "Artist") == first

    def test_best_of_several(self):
        """Test the highest scoring candidate wins regardless of order."""
        cover = catalog_track("cover", "Yesterday", ("Cover Band",))
        original = catalog_track("original", "Yesterday", ("The Beatles",))

        match = MatchEngine().find_best_match([cover, original], "Yesterday", "The Beatles")

        assert match == original
