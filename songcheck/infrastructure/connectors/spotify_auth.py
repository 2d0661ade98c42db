"""Spotify client-credentials authentication.

Wraps spotipy's ``SpotifyClientCredentials`` manager; the blocking token
request runs in a worker thread. The token and its expiry are held only in
memory for the lifetime of the process.
"""

import asyncio
from collections.abc import Callable
import time

from attrs import define, field
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from songcheck.config import get_logger
from songcheck.domain.exceptions import AuthenticationRequiredError

logger = get_logger(__name__).bind(service="spotify")

# Fallback lifetime when the token response carries no expiry
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600
DEFAULT_TOKEN_URL = "https://accounts.spotify.com/api/token"


@define(slots=True)
class ClientCredentialsAuth:
    """Holds a client-credentials bearer token for the Spotify Web API."""

    client_id: str
    client_secret: str = field(repr=False)
    token_url: str = DEFAULT_TOKEN_URL
    clock: Callable[[], float] = field(default=time.time, repr=False)
    _access_token: str | None = field(default=None, init=False, repr=False)
    _expires_at: float = field(default=0.0, init=False)
    _cache_handler: MemoryCacheHandler = field(
        factory=MemoryCacheHandler, init=False, repr=False
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def expires_at(self) -> float:
        """Token expiry as epoch seconds (0 when no token is held)."""
        return self._expires_at

    async def authenticate(self) -> bool:
        """Request a new access token; False when credentials are missing or rejected."""
        if not self.has_credentials:
            logger.warning("Spotify client ID and secret are not configured")
            return False

        manager = SpotifyClientCredentials(
            client_id=self.client_id,
            client_secret=self.client_secret,
            cache_handler=self._cache_handler,
        )
        manager.OAUTH_TOKEN_URL = self.token_url
        try:
            token = await asyncio.to_thread(manager.get_access_token, as_dict=False)
        except (SpotifyOauthError, SpotifyException, OSError) as e:
            logger.error(f"Authentication error: {e}")
            self._access_token = None
            self._expires_at = 0.0
            return False

        token_info = self._cache_handler.get_cached_token() or {}
        self._access_token = token
        self._expires_at = float(
            token_info.get("expires_at", self.clock() + DEFAULT_TOKEN_LIFETIME_SECONDS)
        )
        logger.info("Successfully authenticated with Spotify")
        return True

    def is_authenticated(self) -> bool:
        return self._access_token is not None and self._expires_at > self.clock()

    def get_bearer_token(self) -> str:
        if not self.is_authenticated():
            raise AuthenticationRequiredError()
        return self._access_token  # type: ignore[return-value]
