"""
Minimum-interval rate limiter for the inventory provider API.

The provider allows at most 30 calls per minute. Every outgoing call
reserves a departure time at least min_interval_seconds after the
previous reservation, so the aggregate call rate stays under the
ceiling no matter how many products and dates are queued at once.

Reservations are taken under a threading.Lock and the wait happens
outside it, so one limiter instance can be shared by asyncio tasks on
different event loops and by worker threads in the same process.

Usage:
    from inventory_service.infrastructure.provider.rate_limiter import get_rate_limiter

    limiter = get_rate_limiter()
    data = await limiter.schedule(client.get, url)
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from inventory_service.config import get_settings

logger = structlog.get_logger()

T = TypeVar("T")


class MinIntervalRateLimiter:
    """Serializes call departures with a fixed minimum gap between them."""

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must not be negative")
        self._min_interval = min_interval_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._next_departure: float | None = None
        self._last_departure: float | None = None

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval

    def _reserve(self) -> float:
        """Reserve the next departure slot and return how long to wait for it."""
        with self._lock:
            now = self._clock()
            departure = now if self._next_departure is None else max(now, self._next_departure)
            self._next_departure = departure + self._min_interval
            return departure - now

    def _try_depart(self) -> float:
        """Record a departure now if the floor allows it, else return the remaining wait."""
        with self._lock:
            now = self._clock()
            if self._last_departure is not None:
                remaining = self._last_departure + self._min_interval - now
                if remaining > 0:
                    return remaining
            self._last_departure = now
            # A late departure pushes every later reservation back with it
            if self._next_departure is None or self._next_departure < now + self._min_interval:
                self._next_departure = now + self._min_interval
            return 0.0

    async def acquire(self) -> None:
        """Wait until this caller may send its request."""
        wait = self._reserve()
        while True:
            if wait > 0:
                logger.debug("Rate limiter delaying call", wait_seconds=round(wait, 3))
                await asyncio.sleep(wait)
            wait = self._try_depart()
            if wait <= 0:
                return

    async def schedule(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Acquire a departure slot, then await func(*args, **kwargs)."""
        await self.acquire()
        return await func(*args, **kwargs)

    def reset(self) -> None:
        """Forget the last reservation and departure."""
        with self._lock:
            self._next_departure = None
            self._last_departure = None


# Singleton instance
_rate_limiter: MinIntervalRateLimiter | None = None
_singleton_lock = threading.Lock()


def get_rate_limiter() -> MinIntervalRateLimiter:
    """Get or create the process-wide provider rate limiter."""
    global _rate_limiter
    with _singleton_lock:
        if _rate_limiter is None:
            interval = get_settings().provider_min_interval_seconds
            _rate_limiter = MinIntervalRateLimiter(interval)
            logger.info("Provider rate limiter initialized", min_interval_seconds=interval)
        return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the singleton instance (for testing)."""
    global _rate_limiter
    with _singleton_lock:
        _rate_limiter = None
