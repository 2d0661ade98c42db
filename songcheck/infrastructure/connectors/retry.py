"""Retry wrapper for outbound catalog HTTP requests.

Retries rate-limited (429) responses and transport failures with exponential
backoff plus jitter, honouring the server's ``Retry-After`` header. Performs
no caching and no interpretation of successful responses.
"""

from collections.abc import Awaitable, Callable, Generator
import random
from typing import Any

from attrs import define, field
import backoff
import httpx

from songcheck.config import RetryConfig, get_logger
from songcheck.domain.exceptions import NetworkError, RateLimitedError

logger = get_logger(__name__).bind(service="spotify")

TOO_MANY_REQUESTS = 429


def parse_retry_after(response: httpx.Response | None) -> float | None:
    """Server-requested delay in seconds, if the response carries a usable one."""
    if response is None:
        return None
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def retry_delays(
    initial_seconds: float, max_seconds: float
) -> Generator[float | None, Any, None]:
    """Backoff wait generator: ``Retry-After`` if given, else capped exponential.

    backoff primes the generator with ``None`` and then sends the exception
    of each failed attempt.
    """
    exc = yield None
    attempt = 0
    while True:
        delay = None
        if isinstance(exc, RateLimitedError):
            delay = parse_retry_after(exc.response)
        if delay is None:
            delay = min(initial_seconds * 2**attempt, max_seconds)
        attempt += 1
        exc = yield delay


@define(slots=True)
class RetryingFetcher:
    """Sends requests through an httpx client, retrying 429s and network errors.

    After ``max_retries`` retries a persistent 429 is returned to the caller
    as-is; a persistent transport failure is raised as ``NetworkError``.
    """

    client: httpx.AsyncClient
    config: RetryConfig = field(factory=RetryConfig)
    _send: Callable[[httpx.Request], Awaitable[httpx.Response]] = field(
        init=False, repr=False
    )

    def __attrs_post_init__(self) -> None:
        initial = self.config.initial_delay_ms / 1000
        maximum = self.config.max_delay_ms / 1000
        self._send = backoff.on_exception(
            lambda: retry_delays(initial, maximum),
            (RateLimitedError, httpx.TransportError),
            max_tries=self.config.max_retries + 1,  # +1 because first attempt counts
            jitter=self._add_jitter,
            on_backoff=self._on_backoff,
            on_giveup=self._on_giveup,
        )(self._send_once)

    async def fetch_with_retry(self, request: httpx.Request) -> httpx.Response:
        """Send request, retrying per the configured policy."""
        try:
            return await self._send(request)
        except RateLimitedError as e:
            return e.response
        except httpx.TransportError as e:
            raise NetworkError(
                f"Request to {request.url.host} failed after "
                f"{self.config.max_retries} retries: {e}"
            ) from e

    async def get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.fetch_with_retry(
            self.client.build_request("GET", url, params=params, headers=headers)
        )

    async def _send_once(self, request: httpx.Request) -> httpx.Response:
        response = await self.client.send(request)
        if response.status_code == TOO_MANY_REQUESTS:
            raise RateLimitedError(response)
        return response

    def _add_jitter(self, value: float) -> float:
        return value + random.random() * (self.config.jitter_ms / 1000)

    def _on_backoff(self, details: dict[str, Any]) -> None:
        exception = details.get("exception")
        reason = (
            "Rate limited"
            if isinstance(exception, RateLimitedError)
            else f"Network error ({exception})"
        )
        logger.warning(
            f"{reason}. Retrying in {details['wait']:.2f}s "
            f"(retry {details['tries']}/{self.config.max_retries})"
        )

    def _on_giveup(self, details: dict[str, Any]) -> None:
        exception = details.get("exception")
        logger.error(
            f"All {details['tries']} attempts failed after {details['elapsed']:.2f}s: "
            f"{type(exception).__name__ if exception else 'Unknown'}"
        )
