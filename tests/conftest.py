import httpx
import pytest

from songcheck.config import CacheConfig, RetryConfig
from songcheck.domain.exceptions import (
    AuthenticationRequiredError,
    StorageQuotaExceededError,
)
from songcheck.domain.matching import clear_matching_caches
from songcheck.infrastructure.cache import CacheStore

START_MS = 1_700_000_000_000


class InMemoryKeyValueStorage:
    """Dict-backed KeyValueStorage with an optional byte capacity."""

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self.data: dict[str, str] = {}
        self.capacity_bytes = capacity_bytes
        self.writes: list[str] = []

    async def read(self, key: str) -> str | None:
        return self.data.get(key)

    async def write(self, key: str, value: str) -> None:
        if self.capacity_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self.data.items() if k != key)
            required = others + len(value.encode("utf-8"))
            if required > self.capacity_bytes:
                raise StorageQuotaExceededError(key, required, self.capacity_bytes)
        self.data[key] = value
        self.writes.append(key)

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FakeClock:
    """Epoch-ms clock advanced by hand."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeAuth:
    def __init__(self, authenticated: bool = True, token: str = "test-token") -> None:
        self.authenticated = authenticated
        self.token = token

    def is_authenticated(self) -> bool:
        return self.authenticated

    def get_bearer_token(self) -> str:
        if not self.authenticated:
            raise AuthenticationRequiredError()
        return self.token


class RecordingTransport:
    """Route requests to a handler and remember every request sent."""

    def __init__(self, handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def queries(self) -> list[str]:
        return [request.url.params.get("q", "") for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture(autouse=True)
def reset_matching_caches():
    """Memoized similarity results must not leak between tests."""
    clear_matching_caches()
    yield
    clear_matching_caches()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def cache_config():
    # Long quiet period: tests flush explicitly
    return CacheConfig(save_delay_ms=60_000)


@pytest.fixture
async def cache_store(cache_config, storage, clock):
    store = CacheStore(cache_config, storage, clock=clock)
    yield store
    await store.close()


@pytest.fixture
def retry_config():
    return RetryConfig(max_retries=3, initial_delay_ms=0, max_delay_ms=0, jitter_ms=0)


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def make_track():
    """Factory for Spotify API shaped track records."""

    def _make(
        track_id: str = "track1",
        name: str = "Song",
        artists: tuple[str, ...] = ("Artist",),
        album: str | None = "Album",
        duration_ms: int | None = 200_000,
    ) -> dict:
        return {
            "id": track_id,
            "name": name,
            "artists": [{"name": artist} for artist in artists],
            "album": {"name": album} if album is not None else None,
            "duration_ms": duration_ms,
        }

    return _make


@pytest.fixture
def recording_transport():
    """Factory for a RecordingTransport around a request handler."""
    return RecordingTransport


@pytest.fixture
def storage_factory():
    """Factory for in-memory storages with a byte capacity."""
    return InMemoryKeyValueStorage
