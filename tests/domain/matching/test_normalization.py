"""Tests for title normalization and script detection helpers."""

import pytest

from songcheck.domain.matching import (
    clean_query_text,
    has_cjk,
    has_featuring_marker,
    has_trailing_number,
    normalize,
    split_featuring,
    strip_trailing_number,
)


class TestNormalize:
    """Test the canonical comparison form of names."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Song Title (Remastered 2011) [Live]", "song title"),
            ("Track feat. Someone", "track"),
            ("Track Feat Someone Else", "track"),
            ("On & On 2", "on & on"),
            ("  Multiple   Spaces  ", "multiple spaces"),
            ("Song 1 2", "song"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_examples(self, text, expected):
        """Test brackets, featuring tails, whitespace and trailing numbers."""
        assert normalize(text) == expected

    def test_feat_inside_word_is_kept(self):
        """Test 'feat' is only stripped as a whole word."""
        assert normalize("Feather") == "feather"
        assert normalize("Defeated") == "defeated"

    def test_unicode_composition(self):
        """Test decomposed and composed accents normalize identically."""
        assert normalize("Cafe\u0301") == normalize("Caf\u00e9")

    @pytest.mark.parametrize(
        "text",
        [
            "Song Title (Remastered 2011) [Live]",
            "A (b) 3 [c]",
            "Song 2 feat. X",
            "((nested)) title",
            "曖昧な関係 (TV Size)",
            "1 2 3",
            "Title 2 ",
            "Song (Live\nVersion)",
            "Song feat.\nSomeone",
            "Track [x\ny]",
            "Intro\n2",
        ],
    )
    def test_normalize_is_idempotent(self, text):
        """Test normalizing twice gives the same result as once."""
        once = normalize(text)
        assert normalize(once) == once

    @pytest.mark.parametrize(
        "text", ["Song (Live\nVersion)", "Song [Live\r\nVersion]", "Song feat.\nSomeone"]
    )
    def test_line_breaks_inside_removed_clauses(self, text):
        """Test parentheticals, brackets and feat clauses spanning lines are removed."""
        assert normalize(text) == "song"


class TestFeaturing:
    """Test splitting featured artists off titles."""

    def test_parenthetical_feat(self):
        """Test '(feat. X)' is split into title and artist."""
        split = split_featuring("Song (feat. Artist B)")

        assert split.has_feat
        assert split.main_title == "song"
        assert split.feat_artist == "artist b"

    def test_bare_feat(self):
        """Test a trailing 'feat. X' clause."""
        split = split_featuring("Song feat. Artist")

        assert split.has_feat
        assert split.main_title == "song"
        assert split.feat_artist == "artist"

    def test_no_feat(self):
        """Test titles without a featuring clause are only lower-cased."""
        split = split_featuring("Plain Song")

        assert not split.has_feat
        assert split.main_title == "plain song"
        assert split.feat_artist == ""

    def test_featuring_markers(self):
        """Test detection of feat., ft. and parenthetical feat."""
        assert has_featuring_marker("Song feat. X")
        assert has_featuring_marker("Song ft. X")
        assert has_featuring_marker("Song (feat X)")
        assert not has_featuring_marker("Feather")


class TestScriptDetection:
    """Test CJK detection."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("曖昧", True),
            ("ひらがな", True),
            ("カタカナ", True),
            ("ｱｲｳ", True),
            ("hello", False),
            ("한국어", False),
            ("-", False),
            ("", False),
            (None, False),
        ],
    )
    def test_has_cjk(self, text, expected):
        """Test Chinese and Japanese scripts are detected, Hangul and ASCII are not."""
        assert has_cjk(text) is expected


class TestTrailingNumbers:
    """Test trailing track number helpers."""

    def test_has_trailing_number(self):
        """Test a whitespace-separated trailing number is detected."""
        assert has_trailing_number("Song Title 2")
        assert has_trailing_number("Song Title 12 ")
        assert not has_trailing_number("Song2")
        assert not has_trailing_number("Song Title")

    def test_strip_trailing_number(self):
        """Test only the last number token is removed."""
        assert strip_trailing_number("Song Title 2") == "Song Title"
        assert strip_trailing_number("Song Title") == "Song Title"


class TestCleanQueryText:
    """Test query text cleanup."""

    def test_removes_replacement_characters(self):
        """Test U+FFFD and its mojibake form are removed."""
        assert clean_query_text("Song\ufffd") == "Song"
        assert clean_query_text("ï¿½Song ") == "Song"

    def test_empty(self):
        """Test empty input."""
        assert clean_query_text(None) == ""
        assert clean_query_text("") == ""
