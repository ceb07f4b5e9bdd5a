import asyncio
import unittest
from repo_content_migrator.rate_limiter import RateLimiter, WINDOW_SECONDS


class FakeClock:
    """Simulated monotonic clock whose sleep advances time."""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        target = self.now + seconds
        await asyncio.sleep(0)
        self.now = max(self.now, target)


class TestRateLimiter(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.clock = FakeClock()

    def make_limiter(self, max_requests_per_hour=5000, min_delay_ms=100):
        return RateLimiter(max_requests_per_hour, min_delay_ms,
                           clock=self.clock, sleep=self.clock.sleep)

    async def timed_request(self, limiter, finished):
        await limiter.wait_for_next_request()
        finished.append(self.clock())

    def test_initialization(self):
        """Test rate limiter initialization."""
        limiter = RateLimiter()
        self.assertEqual(limiter.max_requests_per_hour, 5000)
        self.assertEqual(limiter.min_delay_ms, 100)
        self.assertEqual(limiter.request_count, 0)
        self.assertIsNone(limiter.window_start)

    async def test_first_request_does_not_wait(self):
        """Test that the first request goes through immediately and opens the window."""
        self.clock.now = 500.0
        limiter = self.make_limiter()

        await limiter.wait_for_next_request()

        self.assertEqual(self.clock.sleeps, [])
        self.assertEqual(limiter.request_count, 1)
        self.assertEqual(limiter.window_start, 500.0)
        self.assertEqual(limiter.last_request_time, 500.0)

    async def test_min_delay_between_back_to_back_requests(self):
        """Test that consecutive requests are at least min_delay_ms apart."""
        limiter = self.make_limiter(min_delay_ms=100)
        finished = []

        for _ in range(5):
            await self.timed_request(limiter, finished)

        for earlier, later in zip(finished, finished[1:]):
            self.assertGreaterEqual(later - earlier, 0.1 - 1e-9)
        self.assertEqual(limiter.request_count, 5)

    async def test_no_wait_when_delay_already_elapsed(self):
        """Test that no wait occurs when enough time has passed since the last request."""
        limiter = self.make_limiter(min_delay_ms=100)

        await limiter.wait_for_next_request()
        self.clock.now += 5
        await limiter.wait_for_next_request()

        self.assertEqual(self.clock.sleeps, [])

    async def test_concurrent_requests_are_spaced(self):
        """Test that requests waiting at the same time each get their own slot."""
        limiter = self.make_limiter(min_delay_ms=250)
        finished = []

        await asyncio.gather(*(self.timed_request(limiter, finished) for _ in range(5)))

        self.assertEqual(sorted(finished), [0.0, 0.25, 0.5, 0.75, 1.0])

    async def test_hourly_limit_waits_for_window(self):
        """Test that the (N+1)-th request waits until the window has elapsed."""
        limiter = self.make_limiter(max_requests_per_hour=3, min_delay_ms=0)

        for _ in range(3):
            await limiter.wait_for_next_request()
        self.assertEqual(self.clock.sleeps, [])

        self.clock.now = 10.0
        with self.assertLogs('repo_content_migrator.rate_limiter', level='WARNING') as logs:
            await limiter.wait_for_next_request()

        # Should have slept for the rest of the hour (3600 - 10)
        self.assertEqual(self.clock.sleeps, [WINDOW_SECONDS - 10.0])
        self.assertEqual(self.clock.now, WINDOW_SECONDS)
        self.assertEqual(limiter.window_start, WINDOW_SECONDS)
        self.assertEqual(limiter.request_count, 1)
        self.assertIn("Rate limit reached", logs.output[0])

    async def test_concurrent_requests_never_exceed_hourly_limit(self):
        """Test that a burst over the limit makes exactly the extra request wait."""
        limiter = self.make_limiter(max_requests_per_hour=2, min_delay_ms=0)
        finished = []

        await asyncio.gather(*(self.timed_request(limiter, finished) for _ in range(3)))

        self.assertEqual(self.clock.sleeps, [WINDOW_SECONDS])
        self.assertEqual(sorted(finished), [0.0, 0.0, WINDOW_SECONDS])

    async def test_window_reset(self):
        """Test that the window resets once an hour has passed."""
        limiter = self.make_limiter(max_requests_per_hour=1, min_delay_ms=0)

        await limiter.wait_for_next_request()
        self.clock.now = WINDOW_SECONDS + 1

        await limiter.wait_for_next_request()

        self.assertEqual(self.clock.sleeps, [])
        self.assertEqual(limiter.request_count, 1)
        self.assertEqual(limiter.window_start, WINDOW_SECONDS + 1)

    def test_get_status_before_any_request(self):
        """Test status of a fresh limiter."""
        limiter = self.make_limiter()

        status = limiter.get_status()

        self.assertEqual(status['request_count'], 0)
        self.assertEqual(status['max_requests'], 5000)
        self.assertIsNone(status['window_start'])
        self.assertEqual(status['time_until_reset'], 0.0)

    async def test_get_status_has_no_side_effects(self):
        """Test that reading the status does not change the counters."""
        limiter = self.make_limiter(max_requests_per_hour=20)
        await limiter.wait_for_next_request()
        await limiter.wait_for_next_request()
        self.clock.now = 600.0

        first = limiter.get_status()
        second = limiter.get_status()

        self.assertEqual(first, second)
        self.assertEqual(first['request_count'], 2)
        self.assertEqual(first['max_requests'], 20)
        self.assertEqual(first['time_until_reset'], WINDOW_SECONDS - 600.0)
        self.assertEqual(limiter.request_count, 2)

    async def test_get_status_after_window_expired(self):
        """Test that an expired window reports zero usage without resetting state."""
        limiter = self.make_limiter()
        await limiter.wait_for_next_request()
        self.clock.now = WINDOW_SECONDS + 100

        status = limiter.get_status()

        self.assertEqual(status['request_count'], 0)
        self.assertEqual(status['time_until_reset'], 0.0)
        self.assertEqual(limiter.request_count, 1)
        self.assertEqual(limiter.window_start, 0.0)


if __name__ == '__main__':
    unittest.main()
