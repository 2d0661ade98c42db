"""Composition root for CLI commands.

Builds storage, cache, HTTP client, authentication, catalog client and
comparison service from settings, and tears them down again. No component
reads the global settings object itself.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from attrs import define
import httpx

from songcheck.application.services import TrackComparisonService
from songcheck.config import CacheConfig, Settings, get_logger, settings
from songcheck.domain.matching import MatchEngine
from songcheck.domain.repositories import KeyValueStorage
from songcheck.infrastructure.cache import CacheStore
from songcheck.infrastructure.connectors import (
    ClientCredentialsAuth,
    RetryingFetcher,
    SpotifyCatalogClient,
)
from songcheck.infrastructure.persistence import SQLiteKeyValueStorage

logger = get_logger(__name__)


@define(slots=True)
class Runtime:
    """Wired-up components for one CLI invocation."""

    settings: Settings
    storage: KeyValueStorage
    cache: CacheStore
    auth: ClientCredentialsAuth
    catalog: SpotifyCatalogClient
    service: TrackComparisonService
    cache_only: bool = False


async def read_cache_preference(storage: KeyValueStorage, config: CacheConfig) -> bool | None:
    """Enabled flag saved by ``cache enable``/``cache disable``, if any."""
    value = await storage.read(config.preference_storage_key)
    if value is None:
        return None
    return value == "true"


async def save_cache_preference(
    storage: KeyValueStorage, config: CacheConfig, enabled: bool
) -> None:
    await storage.write(config.preference_storage_key, "true" if enabled else "false")


@asynccontextmanager
async def open_storage(
    app_settings: Settings | None = None,
) -> AsyncIterator[SQLiteKeyValueStorage]:
    app_settings = app_settings or settings
    storage = await SQLiteKeyValueStorage.open(app_settings.database)
    try:
        yield storage
    finally:
        await storage.close()


@asynccontextmanager
async def open_cache(
    app_settings: Settings | None = None,
) -> AsyncIterator[CacheStore]:
    """Loaded cache backed by durable storage; pending writes flushed on exit."""
    app_settings = app_settings or settings
    async with open_storage(app_settings) as storage:
        cache = CacheStore(app_settings.cache, storage)
        await cache.load()
        preference = await read_cache_preference(storage, app_settings.cache)
        if preference is not None:
            cache.enabled = preference
        try:
            yield cache
        finally:
            await cache.close()


@asynccontextmanager
async def open_runtime(
    app_settings: Settings | None = None,
    cache_only: bool = False,
) -> AsyncIterator[Runtime]:
    """All components needed for catalog lookups.

    Authenticates unless ``cache_only``; when authentication fails but the
    cache holds data, falls back to cache-only mode.
    """
    app_settings = app_settings or settings
    async with open_cache(app_settings) as cache:
        credentials = app_settings.credentials
        auth = ClientCredentialsAuth(
            client_id=credentials.spotify_client_id,
            client_secret=credentials.spotify_client_secret,
            token_url=app_settings.api.auth_endpoint,
        )
        if not cache_only and not await auth.authenticate():
            if cache.has_data():
                logger.warning("Authentication failed, falling back to cached data only")
                cache_only = True
            else:
                logger.warning("Authentication failed and no cached data is available")

        async with httpx.AsyncClient(timeout=app_settings.api.timeout_seconds) as http_client:
            catalog = SpotifyCatalogClient(
                fetcher=RetryingFetcher(http_client, app_settings.retry),
                auth=auth,
                cache=cache,
                api_config=app_settings.api,
                matcher=MatchEngine(app_settings.matching.song_match_threshold),
            )
            yield Runtime(
                settings=app_settings,
                storage=cache.storage,
                cache=cache,
                auth=auth,
                catalog=catalog,
                service=TrackComparisonService(catalog, app_settings.matching),
                cache_only=cache_only,
            )
