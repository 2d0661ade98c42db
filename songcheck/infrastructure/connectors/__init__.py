"""Connectors to the Spotify Web API."""

from .retry import RetryingFetcher, parse_retry_after, retry_delays
from .spotify import (
    TRACK_ID_PATTERN,
    SearchQuery,
    SpotifyCatalogClient,
    extract_track_id,
    parse_tracks,
)
from .spotify_auth import ClientCredentialsAuth

__all__ = [
    "TRACK_ID_PATTERN",
    "ClientCredentialsAuth",
    "RetryingFetcher",
    "SearchQuery",
    "SpotifyCatalogClient",
    "extract_track_id",
    "parse_retry_after",
    "parse_tracks",
    "retry_delays",
]
