"""RetryPolicy - backoff schedule for the adapter connection bootstrap."""

from __future__ import annotations

import asyncio
import random


class RetryPolicy:
    """Exponential backoff with optional jitter and a bounded attempt count.

    ``base_delay`` defaults to one second, the fixed reconnect interval of
    the classic data-access mixins; ``multiplier=1.0`` reproduces that
    constant schedule exactly.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        jitter: bool = True,
    ) -> None:
        """Configure retry behavior.

        Args:
            max_attempts: Maximum number of connect attempts (including first).
            base_delay: Delay in seconds before the first retry.
            max_delay: Cap on delay in seconds.
            multiplier: Growth factor applied per attempt.
            jitter: If True, scale delays by a random factor in [0.5, 1.5].
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0 or max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        if base_delay > max_delay:
            raise ValueError("base_delay must be <= max_delay")
        if multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.jitter = jitter

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Policy that gives up after the first failure."""
        return cls(max_attempts=1, base_delay=0.0, max_delay=0.0, jitter=False)

    def should_retry(self, attempt: int) -> bool:
        """Return True if another attempt is allowed (attempt is 1-based)."""
        return 1 <= attempt < self.max_attempts

    def delay_for_attempt(self, attempt: int) -> float:
        """Return the delay in seconds after the given 1-based failed attempt."""
        if attempt < 1:
            return 0.0
        delay = min(
            self.base_delay * (self.multiplier ** (attempt - 1)),
            self.max_delay,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())  # noqa: S311
        return float(max(0.0, delay))

    async def wait_before_retry(self, attempt: int) -> None:
        d = self.delay_for_attempt(attempt)
        if d > 0:
            await asyncio.sleep(d)
