"""Duration comparison outcomes for local tracks checked against the catalog."""

from enum import StrEnum

from attrs import define, field

from .track import CatalogTrack, LocalTrack, format_duration


class ComparisonStatus(StrEnum):
    """Outcome of comparing one local file with its catalog match."""

    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"
    NOT_FOUND = "NOT FOUND"


def classify_difference(
    difference_ms: int, length_tolerance_ms: int, warning_tolerance_ms: int
) -> ComparisonStatus:
    """Map an absolute duration difference onto a comparison status."""
    if difference_ms <= length_tolerance_ms:
        return ComparisonStatus.OK
    if difference_ms <= warning_tolerance_ms:
        return ComparisonStatus.WARNING
    return ComparisonStatus.ERROR


@define(frozen=True, slots=True)
class ComparisonResult:
    """Comparison of a single local file.

    ``title`` is the title the match was made with, which differs from
    ``local.title`` when the trailing-number retry succeeded.
    """

    local: LocalTrack
    status: ComparisonStatus
    title: str
    catalog_track: CatalogTrack | None = None
    difference_ms: int | None = None
    title_modified: bool = False
    not_found_reason: str = ""
    error: str | None = None
    error_details: str | None = None

    @property
    def has_issue(self) -> bool:
        return self.status is not ComparisonStatus.OK

    @property
    def original_title(self) -> str:
        return self.local.title

    @property
    def catalog_duration_ms(self) -> int | None:
        return self.catalog_track.duration_ms if self.catalog_track else None

    def as_dict(self) -> dict[str, object]:
        """Flatten for JSON output."""
        return {
            "file_name": self.local.file_name,
            "title": self.title,
            "original_title": self.original_title,
            "title_modified": self.title_modified,
            "artist": self.local.artist,
            "album": self.local.album,
            "local_duration": self.local.formatted_duration,
            "local_duration_ms": self.local.duration_ms,
            "spotify_duration": format_duration(self.catalog_duration_ms),
            "spotify_duration_ms": self.catalog_duration_ms,
            "difference": format_duration(self.difference_ms),
            "difference_ms": self.difference_ms,
            "status": str(self.status),
            "has_issue": self.has_issue,
            "spotify_id": self.catalog_track.id if self.catalog_track else None,
            "not_found_reason": self.not_found_reason,
            "error": self.error,
            "error_details": self.error_details,
        }


@define(frozen=True, slots=True)
class ComparisonReport:
    """All results of one comparison batch."""

    results: list[ComparisonResult] = field(factory=list)
    cache_only: bool = False
    cancelled: bool = False

    @property
    def issues(self) -> int:
        return sum(1 for result in self.results if result.has_issue)

    def count(self, status: ComparisonStatus) -> int:
        return sum(1 for result in self.results if result.status is status)
