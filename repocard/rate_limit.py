"""In-memory fixed-window rate limiter."""

import threading
import time


class RateLimiter:
    """Fixed-window request counter keyed by client.

    A key's window opens on its first request and lasts ``window_seconds``.
    Requests beyond ``max_requests`` inside the window are rejected and do
    not count further. Bursts straddling a window boundary can reach twice
    the nominal rate.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock=time.time,
                 sweep_interval: float | None = None):
        self.max_requests = max_requests
        self.window = window_seconds
        self.sweep_interval = sweep_interval if sweep_interval is not None else window_seconds * 10
        self._clock = clock
        self._lock = threading.Lock()
        # key -> [count, reset_at]
        self._entries: dict[str, list] = {}
        self._last_sweep = clock()

    def is_rate_limited(self, key: str) -> bool:
        """Record a request from ``key`` and report whether it must be rejected."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.sweep_interval:
                self._evict(now)

            entry = self._entries.get(key)
            if entry is None or now > entry[1]:
                self._entries[key] = [1, now + self.window]
                return False

            if entry[0] >= self.max_requests:
                return True

            entry[0] += 1
            return False

    def evict_expired(self) -> int:
        """Drop keys whose window has closed. Returns the number removed."""
        with self._lock:
            return self._evict(self._clock())

    def _evict(self, now: float) -> int:
        expired = [k for k, (_, reset_at) in self._entries.items() if now > reset_at]
        for k in expired:
            del self._entries[k]
        self._last_sweep = now
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
