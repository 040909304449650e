"""
Per-client request rate limiting.

A sliding window of request timestamps is kept per key. Keys idle for
longer than the window are dropped on the next cleanup. All state is
owned by the limiter instance and guarded by its lock.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each key."""

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_requests < 1 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = {}

    def _expire(self, hits: Deque[float], now: float) -> None:
        window_start = now - self.window_seconds
        while hits and hits[0] <= window_start:
            hits.popleft()

    def hit(self, key: str) -> Tuple[bool, Dict]:
        """
        Record a request for ``key`` and check it against the limit.

        Returns (ok, usage_dict). Rejected requests are not recorded.
        """
        with self._lock:
            now = self._clock()
            hits = self._hits.setdefault(key, deque())
            self._expire(hits, now)

            ok = len(hits) < self.max_requests
            if ok:
                hits.append(now)

            usage = {
                "key": key,
                "count": len(hits),
                "limit": self.max_requests,
                "remaining": max(0, self.max_requests - len(hits)),
                "retry_after": 0.0 if ok else hits[0] + self.window_seconds - now,
            }
        return ok, usage

    def check(self, key: str) -> None:
        """
        Record a request, raising when the key is over its limit.

        Raises:
            RateLimitExceeded: With the seconds until a slot frees up
        """
        ok, usage = self.hit(key)
        if not ok:
            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitExceeded(key, usage["retry_after"])

    def cleanup(self) -> int:
        """Drop keys with no request inside the window. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            idle = []
            for key, hits in self._hits.items():
                self._expire(hits, now)
                if not hits:
                    idle.append(key)
            for key in idle:
                del self._hits[key]
        if idle:
            logger.debug(f"Rate limiter dropped {len(idle)} idle keys")
        return len(idle)

    def usage(self, key: str) -> Dict:
        with self._lock:
            hits = self._hits.get(key, deque())
            self._expire(hits, self._clock())
            return {
                "key": key,
                "count": len(hits),
                "limit": self.max_requests,
                "remaining": max(0, self.max_requests - len(hits)),
            }
