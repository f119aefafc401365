"""Transport client for the documentation JSON API.

All network I/O goes through a single HttpClient instance shared across
tool calls. It receives an httpx.AsyncClient via constructor injection;
the lifespan owns the client lifecycle.

Responses are validated before they are cached. Transient failures
(timeouts, dropped connections, 429 and 5xx gateway statuses) are retried
with exponential backoff; every other failure is raised immediately.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.memory_cache import MemoryCache

if TYPE_CHECKING:
    from appledocs.config import CacheSettings, HttpSettings

log = structlog.get_logger()

DOCUMENTATION_REFERER = "https://developer.apple.com/documentation"

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

# Connection reset, timeout and aborted-connection conditions.
RETRYABLE_EXCEPTIONS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
)


def build_http_client(settings: HttpSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={
            "User-Agent": settings.user_agent,
            "dnt": "1",
            "referer": DOCUMENTATION_REFERER,
        },
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def _invalid_response(url: str, reason: str) -> AppleDocsError:
    return AppleDocsError(
        code=ErrorCode.INVALID_RESPONSE,
        message=f"Invalid response from {url}: {reason}",
        suggestion="The documentation API returned an unexpected payload. Try a different path.",
        recoverable=False,
    )


def validate_response(data: Any, url: str) -> dict[str, Any]:
    """Reject payloads that must never reach a caller or the cache."""
    if data is None:
        raise _invalid_response(url, "empty response body")

    if not isinstance(data, dict):
        raise _invalid_response(url, f"unexpected type {type(data).__name__}")

    if not data:
        raise _invalid_response(url, "empty object")

    error = data.get("error")
    if error:
        raise _invalid_response(url, error if isinstance(error, str) else "Unknown API error")

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        raise _invalid_response(url, "; ".join(str(item) for item in errors))

    return data


class HttpClient:
    """Fetches documentation JSON with retry, validation and a memory tier."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: HttpSettings,
        cache: MemoryCache[dict[str, Any]] | None = None,
    ) -> None:
        self._client = client
        self._base_url = settings.base_url.rstrip("/")
        self._max_attempts = settings.max_retry_attempts
        self._base_delay = settings.base_retry_delay_seconds
        self._cache: MemoryCache[dict[str, Any]] = cache if cache is not None else MemoryCache()

    @classmethod
    def from_settings(
        cls,
        client: httpx.AsyncClient,
        http: HttpSettings,
        cache: CacheSettings,
    ) -> HttpClient:
        return cls(client, http, MemoryCache(cache.ttl_seconds, cache.max_size))

    async def request(self, path: str) -> dict[str, Any]:
        """GET ``{base_url}/{path}`` and return the validated JSON object.

        Raises AppleDocsError on validation failures, non-retryable HTTP
        statuses, and once retries are exhausted. The last underlying
        error is chained as the cause.
        """
        url = f"{self._base_url}/{path}"

        cached = self._cache.get(url)
        if cached is not None:
            log.debug("http_memory_cache_hit", url=url)
            return cached

        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            if attempt > 1:
                delay = self._base_delay * 2 ** (attempt - 2)
                log.warning(
                    "http_retry",
                    url=url,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    delay=delay,
                    error=str(last_error),
                )
                await asyncio.sleep(delay)

            try:
                response = await self._client.get(url)
            except RETRYABLE_EXCEPTIONS as exc:
                last_error = exc
                continue
            except httpx.HTTPError as exc:
                raise AppleDocsError(
                    code=ErrorCode.DOCUMENTATION_FETCH_FAILED,
                    message=f"Failed to fetch documentation: {exc}",
                    suggestion="The documentation API could not be reached.",
                    recoverable=True,
                ) from exc

            if response.status_code in RETRYABLE_STATUS_CODES:
                last_error = httpx.HTTPStatusError(
                    f"HTTP {response.status_code} fetching {url}",
                    request=response.request,
                    response=response,
                )
                continue

            if not response.is_success:
                if response.status_code == 404:
                    raise AppleDocsError(
                        code=ErrorCode.DOCUMENTATION_FETCH_FAILED,
                        message=f"HTTP 404 fetching {url}",
                        suggestion="The documentation path does not exist. Check its spelling.",
                        recoverable=False,
                    )
                raise AppleDocsError(
                    code=ErrorCode.DOCUMENTATION_FETCH_FAILED,
                    message=f"HTTP {response.status_code} fetching {url}",
                    suggestion="The documentation API rejected the request.",
                    recoverable=False,
                )

            try:
                payload = response.json()
            except ValueError as exc:
                # JSONDecodeError and UnicodeDecodeError alike
                raise _invalid_response(url, "body is not valid JSON") from exc

            data = validate_response(payload, url)
            self._cache.set(url, data)
            log.info("http_fetch_complete", url=url, attempts=attempt)
            return data

        raise AppleDocsError(
            code=ErrorCode.DOCUMENTATION_FETCH_FAILED,
            message=f"Failed to fetch documentation: {last_error}",
            suggestion="The documentation API may be temporarily unavailable. Try again shortly.",
            recoverable=True,
        ) from last_error

    async def get_documentation(self, path: str) -> dict[str, Any]:
        """Fetch the JSON document for a documentation path."""
        return await self.request(f"{path}.json")

    def clear_cache(self) -> None:
        self._cache.clear()
