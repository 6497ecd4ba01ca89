"""
Tests for RateLimiter and CooldownTracker.
"""

from utils.rate_limiter import CooldownTracker, RateLimiter
from tests.conftest import FakeClock


def _check(limiter, user_id=2, scope="roulette"):
    return limiter.check(scope=scope, guild_id=1, user_id=user_id, limit=2, per_seconds=10)


def test_rate_limiter_allows_within_limit(monkeypatch):
    limiter = RateLimiter()
    times = iter([0.0, 1.0])
    monkeypatch.setattr("utils.rate_limiter.time.monotonic", lambda: next(times))

    assert _check(limiter).allowed is True
    assert _check(limiter).allowed is True


def test_rate_limiter_blocks_and_sets_retry(monkeypatch):
    limiter = RateLimiter()
    times = iter([0.0, 1.0, 2.0])
    monkeypatch.setattr("utils.rate_limiter.time.monotonic", lambda: next(times))

    _check(limiter)
    _check(limiter)
    blocked = _check(limiter)

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 8


def test_rate_limiter_scopes_are_independent(monkeypatch):
    limiter = RateLimiter()
    times = iter([0.0, 1.0, 2.0, 3.0])
    monkeypatch.setattr("utils.rate_limiter.time.monotonic", lambda: next(times))

    _check(limiter)
    _check(limiter)
    assert _check(limiter, scope="work").allowed is True
    assert _check(limiter, user_id=3).allowed is True


def test_rate_limiter_allows_after_window(monkeypatch):
    limiter = RateLimiter()
    times = iter([0.0, 1.0, 11.0])
    monkeypatch.setattr("utils.rate_limiter.time.monotonic", lambda: next(times))

    _check(limiter)
    _check(limiter)
    assert _check(limiter).allowed is True


class TestCooldownTracker:
    """Tests for the explicit-mark cooldown used by transfers."""

    def test_unmarked_key_is_ready(self):
        tracker = CooldownTracker(30, clock=FakeClock())
        assert tracker.remaining(1) == 0
        assert tracker.check(1).allowed is True

    def test_lookup_does_not_start_cooldown(self):
        tracker = CooldownTracker(30, clock=FakeClock())
        tracker.remaining(1)
        tracker.remaining(1)
        assert tracker.remaining(1) == 0

    def test_mark_starts_cooldown(self):
        clock = FakeClock()
        tracker = CooldownTracker(30, clock=clock)
        tracker.mark(1)

        clock.advance(10.5)
        result = tracker.check(1)
        assert result.allowed is False
        assert result.retry_after_seconds == 20  # ceil(19.5)

    def test_expires(self):
        clock = FakeClock()
        tracker = CooldownTracker(30, clock=clock)
        tracker.mark(1)
        clock.advance(30)
        assert tracker.remaining(1) == 0

    def test_clear(self):
        tracker = CooldownTracker(30, clock=FakeClock())
        tracker.mark(1)
        tracker.mark(2)
        tracker.clear(1)
        assert tracker.remaining(1) == 0
        assert tracker.remaining(2) == 30
        tracker.clear()
        assert tracker.remaining(2) == 0
