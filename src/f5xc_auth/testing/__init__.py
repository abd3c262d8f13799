"""Testing utilities for code built on f5xc-auth.

Example:
    ```python
    from f5xc_auth.testing import ManualClock, token_credentials

    clock = ManualClock()
    client = APIClient(
        token_credentials(),
        transport=httpx.MockTransport(handler),
        clock=clock.monotonic,
        sleep=clock.sleep,
    )
    ...
    assert clock.sleeps == [1.0, 2.0]
    ```
"""

import asyncio

from f5xc_auth.auth.credentials import AuthMode, Credentials, CredentialSource


class ManualClock:
    """Deterministic clock whose ``sleep`` advances time instantly.

    Attributes:
        now: Current time in seconds.
        sleeps: Every delay passed to ``sleep``, in call order.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # yield so other tasks can run, as a real sleep would
        await asyncio.sleep(0)


def token_credentials(
    api_url: str = "https://tenant.console.ves.volterra.io/api",
    token: str = "test-token",
    **overrides,
) -> Credentials:
    """A TOKEN-mode credential snapshot for tests."""
    values = {
        "mode": AuthMode.TOKEN,
        "source": CredentialSource.ENVIRONMENT,
        "api_url": api_url,
        "token": token,
    }
    values.update(overrides)
    return Credentials(**values)


__all__ = ["ManualClock", "token_credentials"]
