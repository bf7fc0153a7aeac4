import unittest

from repocard.cache import StarCache
from repocard.exceptions import DataValidationFailure, UpstreamUnavailable
from tests.fakes import FakeClock, FakeGitHubClient

TWO_HOURS = 2 * 60 * 60


class TestStarCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.client = FakeGitHubClient(stars=1234)
        self.cache = StarCache(self.client, "LucasCur", "github-bio", clock=self.clock)

    async def test_first_lookup_fetches_and_stores(self) -> None:
        lookup = await self.cache.get_stars()

        self.assertEqual(lookup.count, 1234)
        self.assertFalse(lookup.fresh)
        self.assertFalse(lookup.stale)
        self.assertEqual(lookup.captured_at, self.clock.now)
        self.assertEqual(self.cache.entry, (1234, self.clock.now))

    async def test_second_lookup_within_ttl_skips_upstream(self) -> None:
        await self.cache.get_stars()
        self.clock.advance(TWO_HOURS - 1)
        self.client.stars = 9999

        lookup = await self.cache.get_stars()

        self.assertTrue(lookup.fresh)
        self.assertEqual(lookup.count, 1234)
        self.assertEqual(lookup.age_seconds, TWO_HOURS - 1)
        self.assertEqual(self.client.star_calls, 1)

    async def test_expired_entry_is_refreshed(self) -> None:
        await self.cache.get_stars()
        self.clock.advance(TWO_HOURS)
        self.client.stars = 1300

        lookup = await self.cache.get_stars()

        self.assertFalse(lookup.fresh)
        self.assertEqual(lookup.count, 1300)
        self.assertEqual(self.client.star_calls, 2)
        self.assertEqual(self.cache.entry, (1300, self.clock.now))

    async def test_failed_refresh_serves_stale_entry(self) -> None:
        await self.cache.get_stars()
        captured = self.clock.now
        self.clock.advance(3 * 60 * 60)
        self.client.stars = None

        lookup = await self.cache.get_stars()

        self.assertTrue(lookup.stale)
        self.assertEqual(lookup.count, 1234)
        self.assertEqual(lookup.captured_at, captured)
        self.assertEqual(lookup.age_seconds, 3 * 60 * 60)

    async def test_failure_without_entry_is_unavailable(self) -> None:
        self.client.stars = None

        with self.assertRaises(UpstreamUnavailable):
            await self.cache.get_stars()
        self.assertIsNone(self.cache.entry)

    async def test_out_of_range_count_leaves_entry_untouched(self) -> None:
        await self.cache.get_stars()
        before = self.cache.entry
        self.clock.advance(TWO_HOURS + 1)
        self.client.stars = 1_500_000

        with self.assertRaises(DataValidationFailure) as ctx:
            await self.cache.get_stars()

        self.assertEqual(ctx.exception.value, 1_500_000)
        self.assertEqual(self.cache.entry, before)

    async def test_fractional_count_is_rejected_and_entry_kept(self) -> None:
        await self.cache.get_stars()
        before = self.cache.entry
        self.clock.advance(TWO_HOURS + 1)
        self.client.stars = 12.5

        with self.assertRaises(DataValidationFailure):
            await self.cache.get_stars()
        self.assertEqual(self.cache.entry, before)

    async def test_negative_count_is_rejected(self) -> None:
        self.client.stars = -1

        with self.assertRaises(DataValidationFailure):
            await self.cache.get_stars()
        self.assertIsNone(self.cache.entry)

    async def test_range_bounds_are_accepted(self) -> None:
        self.client.stars = 1_000_000
        lookup = await self.cache.get_stars()
        self.assertEqual(lookup.count, 1_000_000)

        self.clock.advance(TWO_HOURS)
        self.client.stars = 0
        lookup = await self.cache.get_stars()
        self.assertEqual(lookup.count, 0)

    async def test_entry_timestamp_never_moves_backwards(self) -> None:
        await self.cache.get_stars()
        first = self.cache.entry[1]
        self.clock.advance(TWO_HOURS)
        await self.cache.get_stars()

        self.assertGreater(self.cache.entry[1], first)
