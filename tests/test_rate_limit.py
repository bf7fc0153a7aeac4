import unittest

from repocard.rate_limit import RateLimiter
from tests.fakes import FakeClock


class TestRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = RateLimiter(max_requests=10, window_seconds=60, clock=self.clock)

    def test_eleventh_request_in_window_is_limited(self) -> None:
        results = [self.limiter.is_rate_limited("1.2.3.4") for _ in range(11)]

        self.assertEqual(results[:10], [False] * 10)
        self.assertTrue(results[10])

    def test_keys_are_counted_independently(self) -> None:
        for _ in range(10):
            self.limiter.is_rate_limited("a")

        self.assertTrue(self.limiter.is_rate_limited("a"))
        self.assertFalse(self.limiter.is_rate_limited("b"))

    def test_window_resets_after_it_passes(self) -> None:
        for _ in range(11):
            self.limiter.is_rate_limited("a")

        self.clock.advance(60)
        self.assertTrue(self.limiter.is_rate_limited("a"))

        self.clock.advance(0.001)
        self.assertFalse(self.limiter.is_rate_limited("a"))

    def test_rejected_requests_do_not_count(self) -> None:
        for _ in range(50):
            self.limiter.is_rate_limited("a")

        self.clock.advance(61)
        # New window starts fresh regardless of how many were rejected
        results = [self.limiter.is_rate_limited("a") for _ in range(10)]
        self.assertEqual(results, [False] * 10)

    def test_steady_load_accepts_at_most_ten_per_minute(self) -> None:
        accepted = []
        for second in range(300):
            if not self.limiter.is_rate_limited("steady"):
                accepted.append(second)
            self.clock.advance(1)

        for start in range(300):
            in_window = [t for t in accepted if start <= t < start + 60]
            self.assertLessEqual(len(in_window), 10)

    def test_evict_expired_drops_closed_windows(self) -> None:
        self.limiter.is_rate_limited("old")
        self.clock.advance(30)
        self.limiter.is_rate_limited("new")
        self.clock.advance(31)

        removed = self.limiter.evict_expired()

        self.assertEqual(removed, 1)
        self.assertEqual(len(self.limiter), 1)

    def test_sweep_runs_during_normal_traffic(self) -> None:
        limiter = RateLimiter(max_requests=10, window_seconds=60, clock=self.clock, sweep_interval=120)
        for key in ("a", "b", "c"):
            limiter.is_rate_limited(key)
        self.assertEqual(len(limiter), 3)

        self.clock.advance(121)
        limiter.is_rate_limited("d")

        self.assertEqual(len(limiter), 1)
