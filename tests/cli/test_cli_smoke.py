"""Smoke tests for the songcheck CLI."""

import json

from loguru import logger
import pytest
from typer.testing import CliRunner

from songcheck.config import settings
from songcheck.infrastructure.cli.app import app


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CLI runner with logs, data and the database under a temporary directory."""
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    monkeypatch.setattr(settings.logging, "log_file", tmp_path / "songcheck.log")
    monkeypatch.setattr(settings.logging, "console_level", "ERROR")
    monkeypatch.setattr(settings.database, "url", f"sqlite+aiosqlite:///{tmp_path}/songcheck.db")
    yield CliRunner()
    logger.remove()


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "tracks.json"
    path.write_text(
        json.dumps(
            [
                {
                    "file_name": "01 Bohemian Rhapsody.mp3",
                    "title": "Bohemian Rhapsody",
                    "artist": "Queen",
                    "duration_ms": 354_000,
                }
            ]
        ),
        "utf-8",
    )
    return path


class TestCLIHelp:
    """Test help output for every command group."""

    @pytest.mark.parametrize(
        "args",
        [
            ["--help"],
            ["compare", "--help"],
            ["lookup", "--help"],
            ["status", "--help"],
            ["cache", "--help"],
        ],
    )
    def test_help(self, runner, args):
        """Test help renders without errors."""
        result = runner.invoke(app, args)

        assert result.exit_code == 0
        assert "Usage" in result.stdout

    def test_version(self, runner):
        """Test the version command prints the program name."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "songcheck" in result.stdout


class TestCLICommands:
    """Test commands that need no network access."""

    def test_compare_cache_only(self, runner, manifest):
        """Test a cache-only comparison with an empty cache reports NOT FOUND."""
        result = runner.invoke(app, ["compare", str(manifest), "--cache-only", "--format", "json"])

        assert result.exit_code == 0
        assert '"status": "NOT FOUND"' in result.stdout
        assert '"cache_only": true' in result.stdout

    def test_compare_missing_manifest(self, runner, tmp_path):
        """Test a missing manifest is a usage error."""
        result = runner.invoke(app, ["compare", str(tmp_path / "missing.json")])

        assert result.exit_code != 0

    def test_lookup_cache_only_miss(self, runner):
        """Test an uncached track id cannot be shown in cache-only mode."""
        result = runner.invoke(app, ["lookup", "abc123", "--cache-only"])

        assert result.exit_code == 1
        assert "not found in the local cache" in result.stdout

    def test_cache_commands(self, runner):
        """Test cache stats, disable, enable, cleanup and clear."""
        for args in (
            ["cache", "stats"],
            ["cache", "disable"],
            ["cache", "enable"],
            ["cache", "cleanup"],
            ["cache", "clear", "--yes"],
        ):
            result = runner.invoke(app, args)
            assert result.exit_code == 0, result.stdout

    def test_cache_disable_is_remembered(self, runner):
        """Test the disabled state shows up in later invocations."""
        runner.invoke(app, ["cache", "disable"])

        result = runner.invoke(app, ["cache", "stats"])

        assert "no" in result.stdout
        assert "yes" not in result.stdout
