"""Single-slot star count cache with stale fallback."""

import logging
import threading
import time

from .config import MAX_STAR_COUNT, STAR_CACHE_TTL
from .exceptions import DataValidationFailure, UpstreamUnavailable
from .models import StarLookup

logger = logging.getLogger(__name__)


class StarCache:
    """Holds the last known star count of one repository.

    An entry younger than ``ttl`` is served without contacting GitHub. On a
    miss the count is refetched; if that fails, the previous entry (however
    old) is served as stale. Only validated counts ever reach the slot.
    """

    def __init__(self, client, owner: str, repo: str, ttl: int = STAR_CACHE_TTL, clock=time.time):
        self.client = client
        self.owner = owner
        self.repo = repo
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: tuple[int, float] | None = None  # (count, captured_at)

    @property
    def entry(self) -> tuple[int, float] | None:
        return self._entry

    async def get_stars(self) -> StarLookup:
        now = self._clock()
        with self._lock:
            entry = self._entry
        if entry is not None and now - entry[1] < self.ttl:
            return StarLookup(count=entry[0], fresh=True, age_seconds=int(now - entry[1]), captured_at=entry[1])

        # Concurrent misses may each reach this fetch; the last write wins.
        count = await self.client.fetch_star_count(self.owner, self.repo)

        if count is None:
            with self._lock:
                entry = self._entry
            if entry is None:
                raise UpstreamUnavailable()
            logger.warning("Serving stale star count for %s/%s", self.owner, self.repo)
            return StarLookup(count=entry[0], fresh=False, stale=True,
                              age_seconds=int(now - entry[1]), captured_at=entry[1])

        if not isinstance(count, int) or isinstance(count, bool) or not 0 <= count <= MAX_STAR_COUNT:
            logger.warning("Suspicious star count received: %r", count)
            raise DataValidationFailure(count)

        now = self._clock()
        with self._lock:
            if self._entry is None or now >= self._entry[1]:
                self._entry = (count, now)
        return StarLookup(count=count, fresh=False, captured_at=now)
