"""Track-related domain entities.

Local files and remote catalog records as immutable value objects.
"""

import math
from typing import Any

from attrs import define, field, validators

from songcheck.domain.exceptions import MalformedCandidateError


def round_to_nearest_second(duration_ms: int | float) -> int:
    """Round a millisecond duration to the nearest whole second."""
    return math.floor(float(duration_ms) / 1000 + 0.5) * 1000


def format_duration(duration_ms: int | float | None) -> str:
    """Render a duration as ``m:ss`` (``N/A`` when unknown)."""
    if duration_ms is None:
        return "N/A"
    total_seconds = round_to_nearest_second(duration_ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


@define(frozen=True, slots=True)
class LocalTrack:
    """A local audio file described by its tag metadata.

    Produced by the local track source; immutable once constructed.
    """

    file_name: str = field(validator=validators.instance_of(str))
    title: str = field(validator=validators.instance_of(str))
    artist: str = field(default="", validator=validators.instance_of(str))
    album: str | None = field(default=None)
    duration_ms: int = field(default=0, converter=round_to_nearest_second)

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_ms)


@define(frozen=True, slots=True)
class CatalogArtist:
    """Artist credit on a catalog track."""

    name: str = field(validator=validators.instance_of(str))


@define(frozen=True, slots=True)
class CatalogAlbum:
    """Album a catalog track belongs to."""

    name: str = field(validator=validators.instance_of(str))


@define(frozen=True, slots=True)
class CatalogTrack:
    """Read-only track record returned by the remote catalog."""

    id: str = field(validator=validators.instance_of(str))
    name: str = field(validator=validators.instance_of(str))
    artists: tuple[CatalogArtist, ...] = field(factory=tuple, converter=tuple)
    album: CatalogAlbum | None = field(default=None)
    duration_ms: int | None = field(default=None)

    @property
    def artist_names(self) -> list[str]:
        return [artist.name for artist in self.artists]

    @property
    def album_name(self) -> str:
        return self.album.name if self.album else ""

    @classmethod
    def from_api(cls, data: Any) -> "CatalogTrack":
        """Build a track from a Spotify API track object.

        Raises:
            MalformedCandidateError: if the record lacks an id, a name or a
                well-formed artist list.
        """
        if not isinstance(data, dict):
            raise MalformedCandidateError("record is not an object", data)

        track_id = data.get("id")
        name = data.get("name")
        if not isinstance(track_id, str) or not track_id:
            raise MalformedCandidateError("missing id", data)
        if not isinstance(name, str):
            raise MalformedCandidateError("missing name", data)

        raw_artists = data.get("artists") or []
        if not isinstance(raw_artists, list):
            raise MalformedCandidateError("artists is not a list", data)
        artists = []
        for raw_artist in raw_artists:
            artist_name = raw_artist.get("name") if isinstance(raw_artist, dict) else None
            if not isinstance(artist_name, str):
                raise MalformedCandidateError("artist without a name", data)
            artists.append(CatalogArtist(name=artist_name))

        raw_album = data.get("album")
        album = None
        if isinstance(raw_album, dict) and isinstance(raw_album.get("name"), str):
            album = CatalogAlbum(name=raw_album["name"])

        duration = data.get("duration_ms")
        return cls(
            id=track_id,
            name=name,
            artists=artists,
            album=album,
            duration_ms=int(duration) if isinstance(duration, int | float) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """API-shaped representation used as the cache payload."""
        return {
            "id": self.id,
            "name": self.name,
            "artists": [{"name": artist.name} for artist in self.artists],
            "album": {"name": self.album.name} if self.album else None,
            "duration_ms": self.duration_ms,
        }
