"""Pure domain types for candidate scoring and match selection."""

from typing import Any

from attrs import define

from songcheck.domain.entities.track import CatalogTrack


@define(frozen=True, slots=True)
class MatchEvidence:
    """How a candidate's composite score was calculated.

    Kept for debug logging of the top ranked candidates and for callers that
    want to explain why a match was (or was not) accepted.
    """

    track: CatalogTrack
    name_score: float = 0.0
    artist_score: float = 0.0
    album_bonus: float = 0.0
    score: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.track.name,
            "artists": ", ".join(self.track.artist_names),
            "album": self.track.album_name or "Unknown",
            "score": round(self.score, 2),
            "name_score": round(self.name_score, 2),
            "artist_score": round(self.artist_score, 2),
            "album_bonus": round(self.album_bonus, 2),
        }


@define(frozen=True, slots=True)
class MatchResult:
    """Outcome of one match pass.

    ``track`` is None when no candidate reached the threshold; ``score`` and
    ``evidence`` still describe the best candidate seen, if any.
    """

    track: CatalogTrack | None
    score: float = -1.0
    evidence: MatchEvidence | None = None

    @property
    def success(self) -> bool:
        return self.track is not None

    @classmethod
    def no_match(cls, evidence: MatchEvidence | None = None) -> "MatchResult":
        return cls(track=None, score=evidence.score if evidence else -1.0, evidence=evidence)
