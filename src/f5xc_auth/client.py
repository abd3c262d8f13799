"""Authenticated, rate-limited HTTP client for the F5 Distributed Cloud API.

Every request goes through the same pipeline:

1. take a token from the rate limiter (waits, never drops)
2. take a concurrency slot (FIFO)
3. send, classifying failures (TLS -> ``SSLCertificateError``, non-2xx ->
   ``APIError``) and retrying transient ones with backoff
4. release the slot on every exit path

Example:
    ```python
    from f5xc_auth import APIClient, CredentialResolver, ProfileStore

    resolver = CredentialResolver(ProfileStore())
    credentials = await resolver.initialize()

    async with APIClient(credentials) as client:
        if client.is_available():
            response = await client.get("/web/namespaces")
            print(response.status, response.data)
    ```
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from f5xc_auth import __version__
from f5xc_auth.auth.credentials import AuthMode, CredentialResolver, Credentials
from f5xc_auth.errors import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    F5XCError,
    parse_response_body,
    raise_for_status,
    wrap_ssl_error,
)
from f5xc_auth.transport.limits import ConcurrencyGate, RateLimitConfig, TokenBucket
from f5xc_auth.transport.retry import RetryConfig
from f5xc_auth.transport.tls import build_ssl_context
from f5xc_auth.utils.security import sanitize_url_for_log

logger = logging.getLogger(__name__)

DOCUMENTATION_MODE_MESSAGE = (
    "HTTP client not available - running in documentation mode. "
    "Set F5XC_API_URL and F5XC_API_TOKEN (or F5XC_P12_BUNDLE for certificate auth) to enable API execution."
)

USER_AGENT = f"f5xc-auth/{__version__}"


@dataclass(frozen=True)
class APIClientConfig:
    """HTTP client settings.

    Args:
        timeout: Request timeout in seconds.
        headers: Extra headers sent with every request.
        debug: Log every request and response at DEBUG level.
        rate_limit: Token bucket and concurrency settings.
        retry: Retry settings.
    """

    timeout: float = 30.0
    headers: Mapping[str, str] = field(default_factory=dict)
    debug: bool = False
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {self.timeout}")


@dataclass
class ApiResponse:
    """Response data with metadata."""

    data: Any
    status: int
    headers: dict[str, str]
    duration_ms: float


class APIClient:
    """HTTP client for the F5 XC API.

    With an ``AuthMode.NONE`` snapshot the client is unavailable: no
    transport is built and every request raises :class:`AuthenticationError`
    without touching the network.

    Args:
        credentials: Resolved credential snapshot. It is read, never modified.
        config: Client settings.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
        clock: Monotonic clock for rate limiting and durations.
        sleep: Coroutine used for rate-limit and backoff waits.

    Raises:
        AuthenticationError: If the snapshot claims an auth mode but lacks
            the matching material.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: APIClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.credentials = credentials
        self.config = config or APIClientConfig()
        self._clock = clock
        self._sleep = sleep

        rate_limit = self.config.rate_limit
        self._rate_limiter = TokenBucket(rate_limit.max_requests, rate_limit.refill_rate, clock=clock, sleep=sleep)
        self._gate = ConcurrencyGate(rate_limit.max_concurrent)

        self._client: httpx.AsyncClient | None = None
        if credentials.mode is not AuthMode.NONE:
            self._client = self._create_client(transport)

    @classmethod
    async def from_resolver(cls, resolver: CredentialResolver, config: APIClientConfig | None = None, **kwargs):
        """Initialize ``resolver`` if needed and build a client from its snapshot."""
        credentials = await resolver.initialize()
        return cls(credentials, config, **kwargs)

    def _create_client(self, transport: httpx.AsyncBaseTransport | None) -> httpx.AsyncClient:
        credentials = self.credentials
        if not credentials.api_url:
            raise AuthenticationError("API URL not configured")

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            **self.config.headers,
        }

        if credentials.mode is AuthMode.TOKEN:
            if not credentials.token:
                raise AuthenticationError("API token not configured")
            headers["Authorization"] = f"APIToken {credentials.token}"

        ssl_context = build_ssl_context(credentials)

        client = httpx.AsyncClient(
            base_url=credentials.api_url,
            headers=headers,
            timeout=httpx.Timeout(self.config.timeout),
            verify=ssl_context,
            transport=transport,
        )

        logger.info(
            f"HTTP client created (base_url={sanitize_url_for_log(credentials.api_url)}, "
            f"auth_mode={credentials.mode.value}, timeout={self.config.timeout}s)"
        )
        return client

    def is_available(self) -> bool:
        """True when credentials are present and requests can be made."""
        return self._client is not None

    @property
    def transport(self) -> httpx.AsyncClient | None:
        """The underlying ``httpx.AsyncClient`` for advanced use."""
        return self._client

    @property
    def rate_limiter(self) -> TokenBucket:
        return self._rate_limiter

    @property
    def concurrency_gate(self) -> ConcurrencyGate:
        return self._gate

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        return await self.request("GET", path, params=params, headers=headers, timeout=timeout)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        return await self.request("POST", path, body, params=params, headers=headers, timeout=timeout)

    async def put(
        self,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        return await self.request("PUT", path, body, params=params, headers=headers, timeout=timeout)

    async def delete(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        return await self.request("DELETE", path, params=params, headers=headers, timeout=timeout)

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Send a request through rate limiting, the concurrency gate and retry.

        Raises:
            AuthenticationError: In documentation mode.
            SSLCertificateError: On TLS trust failures.
            APIError: For non-2xx responses once retries are exhausted.
            httpx.TransportError: For connection failures once retries are
                exhausted, and immediately for timeouts.
        """
        if self._client is None:
            raise AuthenticationError(DOCUMENTATION_MODE_MESSAGE)

        await self._rate_limiter.acquire()
        async with self._gate.slot():
            return await self._execute_with_retry(method, path, body, params, headers, timeout)

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
        timeout: float | None,
    ) -> ApiResponse:
        retry = self.config.retry
        attempt = 0

        while True:
            try:
                return await self._send(method, path, body, params, headers, timeout)
            except (F5XCError, httpx.TransportError) as e:
                if not retry.should_retry(e, attempt):
                    if isinstance(e, APIError):
                        logger.error(f"API error {e.status_code} for {method} {path}: {e.message}")
                    raise
                delay = retry.calculate_delay(attempt)
                reason = e.status_code if isinstance(e, APIError) else type(e).__name__

            attempt += 1
            logger.warning(
                f"Request {method} {path} failed with {reason}, "
                f"retrying in {delay}s (attempt {attempt}/{retry.retries})"
            )
            await self._sleep(delay)

    async def _send(
        self,
        method: str,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
        timeout: float | None,
    ) -> ApiResponse:
        if self._client is None:
            raise AuthenticationError(DOCUMENTATION_MODE_MESSAGE)

        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body
        if params is not None:
            kwargs["params"] = params
        if headers is not None:
            kwargs["headers"] = headers
        if timeout is not None:
            kwargs["timeout"] = timeout

        if self.config.debug:
            logger.debug(f"API request {method} {path} (base_url={sanitize_url_for_log(self.credentials.api_url)})")

        start = self._clock()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise
        except httpx.TransportError as e:
            wrapped = wrap_ssl_error(e, self.credentials.api_url)
            if wrapped is not e:
                raise wrapped from e
            raise
        duration_ms = (self._clock() - start) * 1000

        if self.config.debug:
            logger.debug(f"API response {response.status_code} for {method} {path} ({duration_ms:.0f}ms)")

        raise_for_status(response)

        return ApiResponse(
            data=parse_response_body(response),
            status=response.status_code,
            headers=dict(response.headers),
            duration_ms=duration_ms,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def create_client(credentials: Credentials, config: APIClientConfig | None = None, **kwargs: Any) -> APIClient:
    """Create an :class:`APIClient` for ``credentials``."""
    return APIClient(credentials, config, **kwargs)
