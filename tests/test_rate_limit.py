"""
Tests for the per-client rate limiter.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:
    """Test sliding-window limiting."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, clock):
        from scanlayer.rate_limit import RateLimiter
        return RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    def test_allows_up_to_limit(self, limiter):
        assert limiter.hit("a")[0] is True
        ok, usage = limiter.hit("a")
        assert ok is True
        assert usage["remaining"] == 0
        assert limiter.hit("a")[0] is False

    def test_keys_are_independent(self, limiter):
        limiter.hit("a")
        limiter.hit("a")
        assert limiter.hit("b")[0] is True

    def test_window_slides(self, limiter, clock):
        limiter.hit("a")
        clock.now += 30
        limiter.hit("a")
        assert limiter.hit("a")[0] is False

        clock.now += 31
        assert limiter.hit("a")[0] is True

    def test_check_raises_with_retry_after(self, limiter, clock):
        from scanlayer.errors import RateLimitExceeded

        limiter.check("client")
        clock.now += 10
        limiter.check("client")
        with pytest.raises(RateLimitExceeded) as excinfo:
            limiter.check("client")
        assert excinfo.value.key == "client"
        assert excinfo.value.retry_after == pytest.approx(50)

    def test_cleanup_drops_idle_keys(self, limiter, clock):
        limiter.hit("old")
        clock.now += 61
        limiter.hit("new")
        assert limiter.cleanup() == 1
        assert limiter.usage("old")["count"] == 0
        assert limiter.usage("new")["count"] == 1

    def test_invalid_settings(self):
        from scanlayer.rate_limit import RateLimiter

        with pytest.raises(ValueError):
            RateLimiter(max_requests=0)
