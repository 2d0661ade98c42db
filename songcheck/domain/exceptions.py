"""Exception hierarchy for songcheck.

There is no NoMatch error. An unmatched track is an expected outcome
and is represented by ``None``.
"""

from typing import Any


class SongCheckError(Exception):
    """Base exception for all songcheck errors."""


class AuthenticationRequiredError(SongCheckError):
    """A live catalog lookup is needed but no valid credential is available."""

    def __init__(self, message: str = "Not authenticated. Please authenticate first.") -> None:
        super().__init__(message)


class RateLimitedError(SongCheckError):
    """The catalog answered 429 Too Many Requests.

    Carries the response so it can be handed back to the caller once the
    retries are exhausted.
    """

    def __init__(self, response: Any) -> None:
        self.response = response
        super().__init__(f"Rate limited: HTTP {getattr(response, 'status_code', 429)}")


class NetworkError(SongCheckError):
    """Transport-level failure that persisted through all retries."""


class StorageQuotaExceededError(SongCheckError):
    """Durable storage cannot hold the value being written."""

    def __init__(self, key: str, required_bytes: int, capacity_bytes: int) -> None:
        self.key = key
        self.required_bytes = required_bytes
        self.capacity_bytes = capacity_bytes
        super().__init__(
            f"Storage quota exceeded writing '{key}': "
            f"{required_bytes} bytes needed, capacity {capacity_bytes}"
        )


class MalformedCandidateError(SongCheckError):
    """A catalog record is missing fields required for matching."""

    def __init__(self, reason: str, record: Any = None) -> None:
        self.reason = reason
        self.record = record
        super().__init__(f"Malformed catalog record: {reason}")


class CatalogRequestError(SongCheckError):
    """A single catalog request returned a non-success status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Catalog request failed: {status_code} {detail}".strip())


class TrackNotFoundError(SongCheckError):
    """The catalog has no track with the requested id."""

    def __init__(self, track_id: str) -> None:
        self.track_id = track_id
        super().__init__(f"Track with ID {track_id} not found on Spotify.")


class InvalidTrackUrlError(SongCheckError):
    """A URL does not point at a Spotify track."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            "Invalid Spotify track URL. "
            "Expected format: https://open.spotify.com/track/TRACKID"
        )


class ManifestError(SongCheckError):
    """The local track manifest could not be read."""
