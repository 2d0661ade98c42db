"""Tests for reading local tracks from a JSON manifest."""

import json

import pytest

from songcheck.domain.exceptions import ManifestError
from songcheck.infrastructure.sources import load_local_tracks, track_from_record


@pytest.fixture
def write_manifest(tmp_path):
    def _write(content):
        path = tmp_path / "tracks.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content), "utf-8")
        return path

    return _write


class TestLoadLocalTracks:
    """Test manifest parsing and validation."""

    def test_load(self, write_manifest):
        """Test entries become LocalTracks in file order."""
        path = write_manifest(
            [
                {
                    "file_name": "01 Bohemian Rhapsody.mp3",
                    "title": " Bohemian Rhapsody ",
                    "artist": "Queen",
                    "album": "A Night at the Opera",
                    "duration_ms": 354_400,
                },
                {"file_name": "02 Intro.flac", "duration_ms": 60_000},
            ]
        )

        first, second = load_local_tracks(path)

        assert first.title == "Bohemian Rhapsody"
        assert first.album == "A Night at the Opera"
        assert first.duration_ms == 354_000
        assert second.title == "02 Intro"
        assert second.artist == ""
        assert second.album is None

    def test_missing_file(self, tmp_path):
        """Test a missing manifest raises ManifestError."""
        with pytest.raises(ManifestError, match="not found"):
            load_local_tracks(tmp_path / "missing.json")

    @pytest.mark.parametrize("content", ["{not json", '{"file_name": "a.mp3"}'])
    def test_invalid_document(self, write_manifest, content):
        """Test invalid JSON and non-array documents are rejected."""
        with pytest.raises(ManifestError):
            load_local_tracks(write_manifest(content))

    @pytest.mark.parametrize(
        "record",
        [
            "a.mp3",
            {"title": "No file"},
            {"file_name": "a.mp3"},
            {"file_name": "a.mp3", "duration_ms": "354000"},
            {"file_name": "a.mp3", "duration_ms": True},
            {"file_name": "a.mp3", "duration_ms": -1},
        ],
    )
    def test_invalid_entries(self, record):
        """Test entries need a file name and a numeric duration."""
        with pytest.raises(ManifestError):
            track_from_record(record, 1)
