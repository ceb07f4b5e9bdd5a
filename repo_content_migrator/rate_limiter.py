"""Rate limiting for GitHub API requests."""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 3600


class RateLimiter:
    """Hourly request budget with a minimum delay between requests.

    The window is a rolling one: it opens with the first request and resets
    once an hour has passed since it opened. Each call to
    ``wait_for_next_request`` reserves its slot before suspending, so tasks
    that wait concurrently are spaced out instead of firing together.
    """

    def __init__(self, max_requests_per_hour: int = 5000, min_delay_ms: int = 100,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """Initialize rate limiter with an hourly limit and a per-request delay."""
        self.max_requests_per_hour = max_requests_per_hour
        self.min_delay_ms = min_delay_ms
        self._clock = clock
        self._sleep = sleep

        self.request_count = 0
        self.window_start: Optional[float] = None
        self.last_request_time: Optional[float] = None

    @property
    def min_delay(self) -> float:
        return self.min_delay_ms / 1000

    def _reserve_slot(self, now: float) -> float:
        """Claim the next request slot and return the time it may be used."""
        slot = now
        if self.last_request_time is not None:
            slot = max(slot, self.last_request_time + self.min_delay)

        if self.window_start is None or slot - self.window_start >= WINDOW_SECONDS:
            self.window_start = slot
            self.request_count = 0
        elif self.request_count >= self.max_requests_per_hour:
            # Budget spent: the slot moves to the start of the next window
            self.window_start += WINDOW_SECONDS
            self.request_count = 0
            slot = self.window_start
            logger.warning(f"Rate limit reached. Waiting {slot - now:.0f}s...")

        self.last_request_time = slot
        self.request_count += 1
        return slot

    async def wait_for_next_request(self):
        """Wait until one more request is allowed, then record it."""
        now = self._clock()
        wait_time = self._reserve_slot(now) - now

        if wait_time > 0:
            await self._sleep(wait_time)

    def get_status(self) -> Dict[str, Any]:
        """Get current rate limit statistics."""
        now = self._clock()
        if self.window_start is None or now - self.window_start >= WINDOW_SECONDS:
            request_count = 0
            time_until_reset = 0.0
        else:
            request_count = self.request_count
            time_until_reset = max(0.0, WINDOW_SECONDS - (now - self.window_start))

        return {
            'request_count': request_count,
            'max_requests': self.max_requests_per_hour,
            'window_start': self.window_start,
            'time_until_reset': time_until_reset
        }
