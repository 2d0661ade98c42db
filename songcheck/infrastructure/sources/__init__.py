"""Sources of local track metadata."""

from .manifest import load_local_tracks, track_from_record

__all__ = ["load_local_tracks", "track_from_record"]
