"""Transport building blocks for the API client.

Modules:
    limits: Token bucket rate limiter and FIFO concurrency gate
    retry: Retry classification and backoff delays
    tls: SSL context construction (custom CA, insecure mode, mTLS)
"""

from f5xc_auth.transport.limits import ConcurrencyGate, RateLimitConfig, TokenBucket
from f5xc_auth.transport.retry import DEFAULT_RETRY_STATUS_CODES, RetryConfig, RetryStrategy
from f5xc_auth.transport.tls import build_ssl_context, p12_to_pem

__all__ = [
    "DEFAULT_RETRY_STATUS_CODES",
    "ConcurrencyGate",
    "RateLimitConfig",
    "RetryConfig",
    "RetryStrategy",
    "TokenBucket",
    "build_ssl_context",
    "p12_to_pem",
]
