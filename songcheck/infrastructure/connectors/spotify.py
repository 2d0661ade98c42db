"""Spotify catalog client with cache-first, multi-strategy track search.

Talks to the Spotify Web API over httpx (through ``RetryingFetcher``) and
converts API records to ``CatalogTrack`` domain entities.

Key components:
- SpotifyCatalogClient: search, single track lookup and match selection
- SearchQuery: one search strategy's query text and result limit

Search runs up to three strategies and stops at the first that returns
tracks:
1. Field-qualified query (``track:… artist:… album:…``)
2. Plain combined text, only when the input contains CJK characters
3. Plain ``artist title``, only when both are known
The final result, even when empty, is cached under the search key.
"""

from collections.abc import Iterator
import re
from typing import Any

from attrs import define, field
import httpx

from songcheck.config import APIConfig, get_logger, resilient_operation
from songcheck.domain.entities import CatalogTrack
from songcheck.domain.exceptions import (
    AuthenticationRequiredError,
    CatalogRequestError,
    InvalidTrackUrlError,
    MalformedCandidateError,
    NetworkError,
    TrackNotFoundError,
)
from songcheck.domain.matching import MatchEngine, clean_query_text, has_cjk
from songcheck.domain.repositories import AuthProvider
from songcheck.infrastructure.cache import CacheKind, CacheStats, CacheStore, search_key

from .retry import RetryingFetcher

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")

TRACK_URL_PATTERN = re.compile(r"/track/([a-zA-Z0-9]+)")
TRACK_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
_ALBUM_TRAILING_PUNCTUATION = re.compile(r"[.,;:!]+$")


@define(frozen=True, slots=True)
class SearchQuery:
    """A single search strategy: label for logging, query text, result limit."""

    label: str
    query: str
    limit: int


def extract_track_id(url: str) -> str:
    """Track id from an ``open.spotify.com/track/<id>`` URL."""
    match = TRACK_URL_PATTERN.search(url or "")
    if not match:
        raise InvalidTrackUrlError(url)
    return match.group(1)


def parse_tracks(items: Any) -> list[CatalogTrack]:
    """Convert API track records, skipping malformed ones."""
    if not isinstance(items, list):
        return []
    tracks = []
    for item in items:
        try:
            tracks.append(CatalogTrack.from_api(item))
        except MalformedCandidateError as e:
            logger.warning(f"Skipping malformed track record: {e.reason}")
    return tracks


@define(slots=True)
class SpotifyCatalogClient:
    """Cache-aware client for Spotify catalog search and track lookup.

    All collaborators are injected by the composition root. Only
    ``AuthenticationRequiredError`` escapes ``search_track``; other failures
    reduce to an empty result.
    """

    fetcher: RetryingFetcher
    auth: AuthProvider
    cache: CacheStore
    api_config: APIConfig = field(factory=APIConfig)
    matcher: MatchEngine = field(factory=MatchEngine)

    async def search_track(
        self,
        title: str,
        artist: str = "",
        album: str = "",
        cache_only: bool = False,
    ) -> list[CatalogTrack]:
        """Candidate tracks for local metadata, cache first.

        Raises:
            AuthenticationRequiredError: a live search is needed but no valid
                token is held
        """
        title, artist, album = (
            clean_query_text(title),
            clean_query_text(artist),
            clean_query_text(album),
        )
        description = f"{title} - {artist}" + (f" ({album})" if album else "")
        cache_key = search_key(title, artist, album)

        cached = self.cache.lookup(CacheKind.SEARCHES, cache_key)
        if cached is not None:
            logger.info(f"Using cached search result for: {description}")
            return parse_tracks(cached.payload)

        if cache_only:
            logger.info(f"No cached data for: {description} (cache-only mode)")
            return []

        if not self.auth.is_authenticated():
            raise AuthenticationRequiredError()
        token = self.auth.get_bearer_token()

        tracks: list[CatalogTrack] = []
        try:
            for strategy in self._search_strategies(title, artist, album):
                tracks = await self._run_search(strategy, token)
                if tracks:
                    logger.info(
                        f"Found {len(tracks)} tracks with {strategy.label} query. Returning early."
                    )
                    break
        except (NetworkError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Unexpected error during search_track: {e}")
            return []

        logger.info(f"Search process completed. Final track count: {len(tracks)}")
        self.cache.put(
            CacheKind.SEARCHES, cache_key, [track.to_dict() for track in tracks]
        )
        return tracks

    def _search_strategies(
        self, title: str, artist: str, album: str
    ) -> Iterator[SearchQuery]:
        query_parts = []
        if title:
            query_parts.append(f"track:{title}")
        if artist:
            query_parts.append(f"artist:{artist}")
        cleaned_album = _ALBUM_TRAILING_PUNCTUATION.sub("", album).strip()
        if cleaned_album:
            query_parts.append(f"album:{cleaned_album}")
        if query_parts:
            yield SearchQuery(
                "primary", " ".join(query_parts), self.api_config.primary_search_limit
            )

        if has_cjk(title + artist + album):
            simplified = " ".join(part for part in (title, artist, album) if part)
            yield SearchQuery("simplified CJK", simplified, self.api_config.cjk_search_limit)

        if artist and title:
            yield SearchQuery(
                "simple combined", f"{artist} {title}", self.api_config.loose_search_limit
            )

    async def _run_search(self, strategy: SearchQuery, token: str) -> list[CatalogTrack]:
        """One search request; a non-success status counts as zero results."""
        logger.debug(f"Searching Spotify with {strategy.label} query: {strategy.query}")
        response = await self.fetcher.get(
            f"{self.api_config.base_url}/search",
            params={"q": strategy.query, "type": "track", "limit": strategy.limit},
            headers=self._auth_headers(token),
        )
        if not response.is_success:
            logger.warning(
                f"{strategy.label.capitalize()} search failed: "
                f"{response.status_code} {response.reason_phrase}"
            )
            return []

        data = response.json()
        page = data.get("tracks") if isinstance(data, dict) else None
        items = page.get("items") if isinstance(page, dict) else None
        if not isinstance(items, list):
            logger.warning(
                f"{strategy.label.capitalize()} search returned an unexpected payload, "
                "treating it as no results."
            )
            return []
        tracks = parse_tracks(items)
        logger.debug(f"{strategy.label.capitalize()} search returned {len(tracks)} tracks.")
        return tracks

    @resilient_operation("spotify_get_track")
    async def get_track(self, track_id: str, cache_only: bool = False) -> CatalogTrack | None:
        """Track by catalog id, cache first; None on a cache-only miss.

        Raises:
            AuthenticationRequiredError: a live lookup is needed but no valid
                token is held
            TrackNotFoundError: the catalog has no such track
            CatalogRequestError: any other non-success response
        """
        cached = self.cache.lookup(CacheKind.TRACKS, track_id)
        if cached is not None:
            try:
                track = CatalogTrack.from_api(cached.payload)
            except MalformedCandidateError as e:
                logger.warning(f"Ignoring malformed cached track {track_id}: {e.reason}")
            else:
                logger.info(f"Using cached track data for ID: {track_id}")
                return track

        if cache_only:
            logger.info(f"No cached data for track ID: {track_id} (cache-only mode)")
            return None

        if not self.auth.is_authenticated():
            raise AuthenticationRequiredError()

        response = await self.fetcher.get(
            f"{self.api_config.base_url}/tracks/{track_id}",
            headers=self._auth_headers(self.auth.get_bearer_token()),
        )
        if response.status_code == 404:
            raise TrackNotFoundError(track_id)
        if not response.is_success:
            raise CatalogRequestError(response.status_code, response.reason_phrase)

        track = CatalogTrack.from_api(response.json())
        self.cache.put(CacheKind.TRACKS, track_id, track.to_dict())
        return track

    async def get_track_from_url(
        self, url: str, cache_only: bool = False
    ) -> CatalogTrack | None:
        """Track for an ``open.spotify.com/track/<id>`` URL."""
        return await self.get_track(extract_track_id(url), cache_only=cache_only)

    def find_best_match(
        self,
        candidates: list[CatalogTrack],
        title: str,
        artist: str = "",
        album: str = "",
    ) -> CatalogTrack | None:
        """Best candidate via the match engine; a match is cached by track id."""
        match = self.matcher.find_best_match(candidates, title, artist, album)
        if match is not None:
            self.cache.put(CacheKind.TRACKS, match.id, match.to_dict())
        return match

    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated()

    def has_cached_data(self) -> bool:
        return self.cache.has_data()

    async def clear_cache(self) -> None:
        await self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
