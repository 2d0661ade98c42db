"""Local track metadata from a JSON manifest.

Tag parsing happens outside songcheck; the manifest is a JSON array of
objects with ``file_name``, ``title``, ``artist``, optional ``album`` and
``duration_ms``. A missing title falls back to the file name without its
extension.
"""

import json
from pathlib import Path
from typing import Any
import unicodedata

from songcheck.config import get_logger
from songcheck.domain.entities import LocalTrack
from songcheck.domain.exceptions import ManifestError

logger = get_logger(__name__)


def _text(value: Any) -> str:
    return unicodedata.normalize("NFC", value).strip() if isinstance(value, str) else ""


def track_from_record(record: Any, position: int) -> LocalTrack:
    """Build one LocalTrack from a manifest record."""
    if not isinstance(record, dict):
        raise ManifestError(f"Entry {position} is not an object")

    file_name = _text(record.get("file_name"))
    if not file_name:
        raise ManifestError(f"Entry {position} has no file_name")

    duration = record.get("duration_ms")
    if isinstance(duration, bool) or not isinstance(duration, int | float) or duration < 0:
        raise ManifestError(f"Entry {position} ({file_name}) has no valid duration_ms")

    album = _text(record.get("album")) or None
    return LocalTrack(
        file_name=file_name,
        title=_text(record.get("title")) or Path(file_name).stem,
        artist=_text(record.get("artist")),
        album=album,
        duration_ms=duration,
    )


def load_local_tracks(path: Path | str) -> list[LocalTrack]:
    """Read all tracks from a manifest file.

    Raises:
        ManifestError: the file is missing, is not valid JSON, or holds an
            invalid entry
    """
    manifest_path = Path(path)
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {manifest_path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Could not read manifest {manifest_path}: {e}") from e

    if not isinstance(data, list):
        raise ManifestError("Manifest must be a JSON array of track objects")

    tracks = [track_from_record(record, position) for position, record in enumerate(data, 1)]
    logger.info(f"Loaded {len(tracks)} tracks from {manifest_path}")
    return tracks
