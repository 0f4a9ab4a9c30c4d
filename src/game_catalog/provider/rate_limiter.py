"""
Rate limiter for provider requests.

Token bucket: bursts up to ``burst_size`` requests, then throttles
to ``requests_per_minute``. Shared by every request a provider makes,
including escalations from concurrent searches.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from game_catalog.logger import get_logger


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter."""

    requests_per_minute: int = 60
    burst_size: int = 5


@dataclass
class RateLimiter:
    """
    Token bucket rate limiter.

    Example:
        >>> limiter = RateLimiter(RateLimiterConfig(requests_per_minute=60))
        >>> async with limiter:
        ...     await make_request()
    """

    config: RateLimiterConfig
    clock: Callable[[], float] = time.monotonic
    _tokens: float = field(init=False)
    _last_update: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)
    _logger: Any = field(init=False)

    def __post_init__(self) -> None:
        self._tokens = float(self.config.burst_size)
        self._last_update = self.clock()
        self._logger = get_logger(__name__, component="rate_limiter")

    @property
    def _refill_rate(self) -> float:
        """Tokens added per second."""
        return self.config.requests_per_minute / 60.0

    def _refill_tokens(self) -> None:
        now = self.clock()
        elapsed = now - self._last_update
        self._tokens = min(
            float(self.config.burst_size),
            self._tokens + elapsed * self._refill_rate,
        )
        self._last_update = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill_tokens()

            if self._tokens < 1:
                wait_time = (1 - self._tokens) / self._refill_rate
                self._logger.debug(
                    "Rate limit reached, waiting",
                    wait_seconds=round(wait_time, 2),
                    tokens_available=round(self._tokens, 2),
                )
                await asyncio.sleep(wait_time)
                self._refill_tokens()

            self._tokens -= 1

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass

    @property
    def available_tokens(self) -> float:
        """Current available tokens (for monitoring)."""
        self._refill_tokens()
        return self._tokens
