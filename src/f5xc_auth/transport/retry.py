"""Retry policy for API requests.

A failed attempt is retried when:
- fewer than ``retries`` retries have been made, and
- the API answered with a retryable status (default 429, 500, 502, 503, 504),
  or the request failed at the connection level without any response.

Timeouts are terminal and never retried, so long waits do not compound.

| Strategy | Delay before retry ``n`` (0-indexed) | Default sequence |
|----------|--------------------------------------|------------------|
| ``exponential`` | ``base_delay * 2 ** n`` | 1, 2, 4 seconds |
| ``linear`` | ``base_delay * (n + 1)`` | 1, 2, 3 seconds |

Example:
    ```python
    from f5xc_auth.transport.retry import RetryConfig

    retry = RetryConfig(retries=5, retry_delay="linear", retry_on=frozenset({429, 503}))
    if retry.should_retry(error, attempt):
        await asyncio.sleep(retry.calculate_delay(attempt))
    ```
"""

from dataclasses import dataclass
from enum import Enum

import httpx

from f5xc_auth.errors import APIError, ConfigurationError


class RetryStrategy(str, Enum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


DEFAULT_RETRY_STATUS_CODES: frozenset[int] = frozenset([429, 500, 502, 503, 504])

# Connection-level failures that produced no HTTP response. httpx.TimeoutException
# is deliberately absent.
RETRYABLE_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


@dataclass(frozen=True)
class RetryConfig:
    """Retry settings and the decisions derived from them.

    Args:
        retries: Maximum number of retries after the first attempt.
        retry_delay: ``"exponential"`` or ``"linear"``.
        retry_on: HTTP status codes that trigger a retry.
        base_delay: Delay unit in seconds.
    """

    retries: int = 3
    retry_delay: RetryStrategy | str = RetryStrategy.EXPONENTIAL
    retry_on: frozenset[int] = DEFAULT_RETRY_STATUS_CODES
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ConfigurationError(f"retries must be >= 0, got {self.retries}")
        if self.base_delay < 0:
            raise ConfigurationError(f"base_delay must be >= 0, got {self.base_delay}")
        try:
            strategy = RetryStrategy(self.retry_delay)
        except ValueError:
            raise ConfigurationError(
                f"retry_delay must be 'exponential' or 'linear', got {self.retry_delay!r}"
            ) from None
        object.__setattr__(self, "retry_delay", strategy)
        object.__setattr__(self, "retry_on", frozenset(self.retry_on))

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Determine if a failed attempt should be retried.

        Args:
            error: The classified error raised by the attempt.
            attempt: Number of retries already made (0 for the first failure).
        """
        if attempt >= self.retries:
            return False

        if isinstance(error, APIError):
            return error.status_code in self.retry_on

        if isinstance(error, httpx.TimeoutException):
            return False

        return isinstance(error, RETRYABLE_TRANSPORT_ERRORS)

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (0-indexed)."""
        if self.retry_delay is RetryStrategy.EXPONENTIAL:
            return self.base_delay * (2**attempt)
        return self.base_delay * (attempt + 1)
