"""Request admission control: token bucket rate limiter and concurrency gate.

How the token bucket works:
- The bucket holds up to ``capacity`` tokens (burst size) and starts full
- Tokens refill continuously at ``refill_rate`` tokens/second
- Each request consumes 1 token; when none is available the caller waits

Both objects are per-client state used from a single event loop. The clock
and sleep functions are injectable so refill timing can be tested without
real timers.

Usage:
    ```python
    bucket = TokenBucket(capacity=10, refill_rate=10)
    gate = ConcurrencyGate(max_concurrent=5)

    await bucket.acquire()
    async with gate.slot():
        response = await send()
    ```
"""

import asyncio
import contextlib
import logging
import time
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

from f5xc_auth.errors import ConfigurationError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting settings.

    ``max_requests`` per ``per_seconds`` sets both the bucket capacity and
    its refill rate; ``max_concurrent`` bounds in-flight requests.
    """

    max_requests: int = 10
    per_seconds: float = 1.0
    max_concurrent: int = 5

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ConfigurationError(f"max_requests must be >= 1, got {self.max_requests}")
        if self.per_seconds <= 0:
            raise ConfigurationError(f"per_seconds must be > 0, got {self.per_seconds}")
        if self.max_concurrent < 1:
            raise ConfigurationError(f"max_concurrent must be >= 1, got {self.max_concurrent}")

    @property
    def refill_rate(self) -> float:
        return self.max_requests / self.per_seconds


class TokenBucket:
    """Token bucket rate limiter for async callers.

    ``acquire`` never drops a request: it suspends until a token exists.
    Waiters are served in arrival order.

    Args:
        capacity: Maximum tokens (burst capacity).
        refill_rate: Tokens added per second.
        clock: Monotonic clock.
        sleep: Coroutine used to wait.
    """

    def __init__(
        self,
        capacity: float,
        refill_rate: float,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        if capacity <= 0:
            raise ConfigurationError(f"Token bucket capacity must be > 0, got {capacity}")
        if refill_rate <= 0:
            raise ConfigurationError(f"Token bucket refill rate must be > 0, got {refill_rate}")

        self.capacity = float(capacity)
        self.refill_rate = float(refill_rate)
        self._clock = clock
        self._sleep = sleep
        self._tokens = self.capacity
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    async def acquire(self, tokens: float = 1.0) -> float:
        """Take ``tokens`` from the bucket, waiting for refill if needed.

        Returns:
            Seconds spent waiting for refill.

        Raises:
            ValueError: If ``tokens`` exceeds the bucket capacity.
        """
        if tokens > self.capacity:
            raise ValueError(f"Requested tokens ({tokens}) exceeds bucket capacity ({self.capacity})")

        async with self._lock:
            self._refill()
            wait_time = 0.0
            if self._tokens < tokens:
                wait_time = (tokens - self._tokens) / self.refill_rate
                logger.debug(f"Rate limit reached, waiting {wait_time:.3f}s")
                await self._sleep(wait_time)
                self._refill()
            self._tokens -= tokens
            return wait_time


class ConcurrencyGate:
    """Bounded number of concurrent slots with FIFO waiters.

    A released slot is handed directly to the oldest waiter, so admission
    order matches arrival order.

    Args:
        max_concurrent: Number of slots.
    """

    def __init__(self, max_concurrent: int):
        if max_concurrent < 1:
            raise ConfigurationError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self) -> None:
        if self._active < self.max_concurrent and not self._waiters:
            self._active += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # the slot was handed over just before cancellation
                self.release()
            else:
                with contextlib.suppress(ValueError):
                    self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        if self._active <= 0:
            raise RuntimeError("ConcurrencyGate released more times than acquired")
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1

    @contextlib.asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block; always released."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()
