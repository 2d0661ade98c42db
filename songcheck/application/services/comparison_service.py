"""Duration comparison of local tracks against their catalog matches.

Drives the catalog client one local track at a time: search, pick the best
match, retry without a trailing track number when nothing matched, then
classify the duration difference as OK / WARNING / ERROR or NOT FOUND.

Clean Architecture compliant - depends only on the catalog protocol and
matching configuration, both injected.
"""

import asyncio
from collections.abc import Callable, Sequence

from songcheck.config import MatchingConfig, get_logger
from songcheck.domain.entities import (
    CatalogTrack,
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    LocalTrack,
    classify_difference,
    format_duration,
)
from songcheck.domain.exceptions import (
    AuthenticationRequiredError,
    NetworkError,
    SongCheckError,
)
from songcheck.domain.matching import (
    clear_matching_caches,
    has_trailing_number,
    strip_trailing_number,
)
from songcheck.domain.repositories import TrackCatalogProtocol

logger = get_logger(__name__)

# Called after each track with (position, total, result)
ProgressCallback = Callable[[int, int, ComparisonResult], None]


def build_not_found_reason(
    track: LocalTrack, candidates: Sequence[CatalogTrack], cache_only: bool
) -> str:
    """Explain why a search produced no acceptable match."""
    if candidates:
        closest = candidates[0]
        return (
            f"Found {len(candidates)} results, but none matched closely enough. "
            f'The closest match was "{closest.name}" by {", ".join(closest.artist_names)}.'
        )

    reason = "No search results returned."
    if track.artist:
        if "/" in track.artist:
            reason += (
                f' Check if "{track.artist}" is spelled correctly '
                "or appears differently on Spotify."
            )
        if cache_only:
            reason += (
                " This track may not be in your local cache yet. "
                "Try authenticating to search Spotify directly."
            )
        else:
            reason += " The track might be region-restricted or recently added to Spotify."
    else:
        reason += " Consider adding artist information to the file metadata."
        if cache_only:
            reason += " Limited cache data may prevent finding tracks without artist information."
        else:
            reason += " Spotify searches are more effective with artist names."
    return reason


def describe_error(error: Exception) -> str:
    """User-facing hint for a failed comparison."""
    message = str(error).lower()
    if isinstance(error, NetworkError) or "timeout" in message or "network" in message:
        return (
            "There was a network issue when connecting to Spotify. "
            "Please check your internet connection."
        )
    if "rate limit" in message:
        return "Spotify API rate limit exceeded. Please wait a moment and try again."
    return (
        "There was an issue comparing this track with Spotify. "
        "Try authenticating again or check the track metadata."
    )


class TrackComparisonService:
    """Compares local track durations with their best catalog matches."""

    def __init__(
        self, catalog: TrackCatalogProtocol, matching_config: MatchingConfig | None = None
    ) -> None:
        self.catalog = catalog
        self.config = matching_config or MatchingConfig()

    async def compare_tracks(
        self,
        tracks: Sequence[LocalTrack],
        cache_only: bool = False,
        cancel_event: asyncio.Event | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ComparisonReport:
        """Compare each track in order, one lookup at a time.

        Args:
            tracks: Local tracks to check
            cache_only: Answer only from the local cache, never the network
            cancel_event: When set, stops before the next track
            progress_callback: Invoked after each track

        Raises:
            AuthenticationRequiredError: a live lookup was needed without a
                valid token; the caller should re-authenticate
        """
        clear_matching_caches()
        results: list[ComparisonResult] = []
        cancelled = False

        logger.info(
            f"Comparing {len(tracks)} tracks"
            + (" using cached data only" if cache_only else "")
        )
        for position, track in enumerate(tracks, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Comparison cancelled after {len(results)} tracks")
                cancelled = True
                break

            try:
                result = await self.compare_track(track, cache_only=cache_only)
            except AuthenticationRequiredError:
                raise
            except (SongCheckError, ValueError, TypeError, KeyError, AttributeError) as e:
                logger.opt(exception=e).error(f"Error comparing {track.file_name}: {e}")
                result = ComparisonResult(
                    local=track,
                    status=ComparisonStatus.ERROR,
                    title=track.title,
                    error=str(e),
                    error_details=describe_error(e),
                )

            results.append(result)
            if progress_callback is not None:
                progress_callback(position, len(tracks), result)

        report = ComparisonReport(results=results, cache_only=cache_only, cancelled=cancelled)
        logger.info(f"Comparison finished: {len(results)} tracks, {report.issues} with issues")
        return report

    async def compare_track(self, track: LocalTrack, cache_only: bool = False) -> ComparisonResult:
        """Match one local track and classify its duration difference."""
        title, artist, album = track.title, track.artist, track.album or ""

        candidates = await self.catalog.search_track(title, artist, album, cache_only=cache_only)
        match = self.catalog.find_best_match(candidates, title, artist, album)

        title_modified = False
        not_found_reason = ""
        if match is None:
            not_found_reason = build_not_found_reason(track, candidates, cache_only)

            if has_trailing_number(track.title):
                stripped = strip_trailing_number(track.title)
                candidates = await self.catalog.search_track(
                    stripped, artist, album, cache_only=cache_only
                )
                match = self.catalog.find_best_match(candidates, stripped, artist)
                if match is not None:
                    logger.info(f'Matched "{track.title}" after stripping to "{stripped}"')
                    title, title_modified, not_found_reason = stripped, True, ""
                else:
                    not_found_reason += (
                        f" Tried without the number ({stripped}) but still no match."
                    )

        if match is None:
            return ComparisonResult(
                local=track,
                status=ComparisonStatus.NOT_FOUND,
                title=title,
                not_found_reason=not_found_reason,
            )

        if match.duration_ms is None:
            return ComparisonResult(
                local=track,
                status=ComparisonStatus.ERROR,
                title=title,
                catalog_track=match,
                title_modified=title_modified,
                error="Catalog track has no duration",
                error_details="Spotify did not report a duration for the matched track.",
            )

        difference = abs(track.duration_ms - match.duration_ms)
        status = classify_difference(
            difference, self.config.length_tolerance_ms, self.config.warning_tolerance_ms
        )
        error_details = None
        if status is ComparisonStatus.ERROR:
            direction = "longer" if track.duration_ms > match.duration_ms else "shorter"
            error_details = (
                f"The track is {format_duration(difference)} {direction} "
                "than the Spotify version."
            )

        return ComparisonResult(
            local=track,
            status=status,
            title=title,
            catalog_track=match,
            difference_ms=difference,
            title_modified=title_modified,
            error_details=error_details,
        )
