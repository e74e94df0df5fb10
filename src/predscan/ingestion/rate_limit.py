"""Async token-bucket rate limiter for paginated REST APIs. Backoff on 429."""

from __future__ import annotations

import asyncio
import time


class TokenBucket:
    """Simple token bucket: refill rate per second, max burst."""

    def __init__(self, rate: float = 10.0, capacity: int | None = None) -> None:
        self.rate = rate
        self.capacity = capacity or max(1, int(rate * 2))
        self.tokens = float(self.capacity)
        self.last = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last) * self.rate)
        self.last = now

    async def consume(self, n: int = 1) -> bool:
        """Consume n tokens. Return True if allowed, False if not enough."""
        async with self._lock:
            self._refill()
            if self.tokens >= n:
                self.tokens -= n
                return True
            return False

    async def wait_for_token(self, n: int = 1) -> None:
        """Suspend until n tokens available."""
        while not await self.consume(n):
            await asyncio.sleep(max(0.01, (n - self.tokens) / self.rate))


def backoff_on_429(retries: int = 0, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """Return delay in seconds for next retry after a 429. Exponential backoff."""
    return min(max_delay, base_delay * (2**retries))
