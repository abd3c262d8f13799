"""Tests for the token bucket and concurrency gate."""

import asyncio

import pytest

from f5xc_auth.errors import ConfigurationError
from f5xc_auth.testing import ManualClock
from f5xc_auth.transport.limits import ConcurrencyGate, RateLimitConfig, TokenBucket


class TestRateLimitConfig:
    """Test RateLimitConfig validation."""

    @pytest.mark.unit
    def test_defaults(self):
        config = RateLimitConfig()

        assert (config.max_requests, config.per_seconds, config.max_concurrent) == (10, 1.0, 5)
        assert config.refill_rate == 10.0

    @pytest.mark.unit
    def test_refill_rate(self):
        assert RateLimitConfig(max_requests=30, per_seconds=60).refill_rate == 0.5

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "kwargs",
        [{"max_requests": 0}, {"per_seconds": 0}, {"per_seconds": -1}, {"max_concurrent": 0}],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            RateLimitConfig(**kwargs)


class TestTokenBucket:
    """Test TokenBucket refill and waiting."""

    @pytest.fixture
    def clock(self):
        return ManualClock()

    @pytest.mark.unit
    async def test_burst_within_capacity_does_not_wait(self, clock):
        bucket = TokenBucket(capacity=10, refill_rate=10, clock=clock.monotonic, sleep=clock.sleep)

        for _ in range(10):
            assert await bucket.acquire() == 0.0

        assert clock.sleeps == []

    @pytest.mark.unit
    async def test_request_beyond_burst_waits_for_refill(self, clock):
        """The 11th request in a burst of a 10/s bucket waits about 0.1s."""
        bucket = TokenBucket(capacity=10, refill_rate=10, clock=clock.monotonic, sleep=clock.sleep)

        for _ in range(10):
            await bucket.acquire()
        waited = await bucket.acquire()

        assert waited == pytest.approx(0.1)
        assert clock.sleeps == pytest.approx([0.1])

    @pytest.mark.unit
    async def test_refills_over_time(self, clock):
        bucket = TokenBucket(capacity=5, refill_rate=1, clock=clock.monotonic, sleep=clock.sleep)
        for _ in range(5):
            await bucket.acquire()
        assert bucket.available == pytest.approx(0)

        clock.advance(3)
        assert bucket.available == pytest.approx(3)

        clock.advance(100)
        assert bucket.available == pytest.approx(5)

    @pytest.mark.unit
    async def test_concurrent_waiters_are_spaced(self, clock):
        bucket = TokenBucket(capacity=1, refill_rate=2, clock=clock.monotonic, sleep=clock.sleep)

        await asyncio.gather(*(bucket.acquire() for _ in range(3)))

        assert clock.sleeps == pytest.approx([0.5, 0.5])
        assert clock.now == pytest.approx(1.0)

    @pytest.mark.unit
    async def test_oversized_request(self, clock):
        bucket = TokenBucket(capacity=2, refill_rate=1, clock=clock.monotonic, sleep=clock.sleep)
        with pytest.raises(ValueError, match="exceeds bucket capacity"):
            await bucket.acquire(3)

    @pytest.mark.unit
    @pytest.mark.parametrize(("capacity", "rate"), [(0, 1), (1, 0)])
    def test_invalid_parameters(self, capacity, rate):
        with pytest.raises(ConfigurationError):
            TokenBucket(capacity=capacity, refill_rate=rate)


class TestConcurrencyGate:
    """Test ConcurrencyGate admission."""

    @pytest.mark.unit
    async def test_caps_in_flight_work(self):
        gate = ConcurrencyGate(max_concurrent=2)
        release = asyncio.Event()
        peak = 0

        async def worker():
            nonlocal peak
            async with gate.slot():
                peak = max(peak, gate.active)
                await release.wait()

        tasks = [asyncio.create_task(worker()) for _ in range(3)]
        await asyncio.sleep(0)

        assert gate.active == 2
        assert gate.waiting == 1

        release.set()
        await asyncio.gather(*tasks)

        assert peak == 2
        assert gate.active == 0
        assert gate.waiting == 0

    @pytest.mark.unit
    async def test_waiters_are_admitted_in_order(self):
        gate = ConcurrencyGate(max_concurrent=1)
        order = []

        await gate.acquire()

        async def worker(name):
            async with gate.slot():
                order.append(name)

        tasks = [asyncio.create_task(worker(name)) for name in "abc"]
        await asyncio.sleep(0)
        assert gate.waiting == 3

        gate.release()
        await asyncio.gather(*tasks)

        assert order == ["a", "b", "c"]
        assert gate.active == 0

    @pytest.mark.unit
    async def test_slot_released_on_error(self):
        gate = ConcurrencyGate(max_concurrent=1)

        with pytest.raises(RuntimeError, match="boom"):
            async with gate.slot():
                raise RuntimeError("boom")

        assert gate.active == 0
        async with gate.slot():
            assert gate.active == 1

    @pytest.mark.unit
    async def test_cancelled_waiter_gives_up_its_place(self):
        gate = ConcurrencyGate(max_concurrent=1)
        await gate.acquire()

        waiter = asyncio.create_task(gate.acquire())
        await asyncio.sleep(0)
        assert gate.waiting == 1

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert gate.waiting == 0
        gate.release()
        assert gate.active == 0

    @pytest.mark.unit
    def test_over_release(self):
        with pytest.raises(RuntimeError, match="released more times"):
            ConcurrencyGate(max_concurrent=1).release()

    @pytest.mark.unit
    def test_invalid_size(self):
        with pytest.raises(ConfigurationError):
            ConcurrencyGate(max_concurrent=0)
