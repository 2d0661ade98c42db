"""Domain interfaces for the collaborators the matching core depends on.

Infrastructure provides the implementations (SQLite storage, Spotify client
credentials, the Spotify catalog client); the application layer and tests
depend only on these contracts.
"""

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from songcheck.domain.entities import CatalogTrack


class KeyValueStorage(Protocol):
    """Durable string storage with a bounded capacity.

    ``write`` raises ``StorageQuotaExceededError`` when the value does not
    fit; nothing is written in that case.
    """

    def read(self, key: str) -> Awaitable[str | None]:
        """Stored value for key, or None."""
        ...

    def write(self, key: str, value: str) -> Awaitable[None]:
        """Store value under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> Awaitable[None]:
        """Delete key if present."""
        ...


class AuthProvider(Protocol):
    """Holder of the bearer credential used for catalog requests."""

    def is_authenticated(self) -> bool:
        """True while a non-expired access token is held."""
        ...

    def get_bearer_token(self) -> str:
        """Current access token; raises AuthenticationRequiredError if none."""
        ...


class TrackCatalogProtocol(Protocol):
    """Catalog operations used by the comparison workflow."""

    def search_track(
        self, title: str, artist: str = "", album: str = "", cache_only: bool = False
    ) -> Awaitable[list["CatalogTrack"]]:
        """Candidate tracks for the given metadata."""
        ...

    def find_best_match(
        self,
        candidates: list["CatalogTrack"],
        title: str,
        artist: str = "",
        album: str = "",
    ) -> "CatalogTrack | None":
        """Best candidate at or above the match threshold."""
        ...
