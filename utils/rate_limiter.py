"""
Simple in-memory rate limiting for Discord interactions.

This is not meant to be a perfect security boundary (restarts reset state),
but it prevents accidental spam and throttles abuse such as rapid transfers.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after_seconds: int = 0


class RateLimiter:
    """
    Token-bucket-ish limiter: allow N events per window per key.
    """

    def __init__(self) -> None:
        # key -> list of timestamps (monotonic seconds)
        self._hits: dict[tuple[str, int, int], list[float]] = {}

    def check(
        self, *, scope: str, guild_id: int, user_id: int, limit: int, per_seconds: int
    ) -> RateLimitResult:
        now = time.monotonic()
        key = (scope, guild_id, user_id)
        window_start = now - per_seconds

        hits = self._hits.get(key, [])
        hits = [t for t in hits if t >= window_start]

        if len(hits) >= limit:
            oldest = min(hits)
            retry_after = int(max(0.0, (oldest + per_seconds) - now) + 0.999)
            self._hits[key] = hits
            return RateLimitResult(allowed=False, retry_after_seconds=retry_after)

        hits.append(now)
        self._hits[key] = hits
        return RateLimitResult(allowed=True, retry_after_seconds=0)


class CooldownTracker:
    """
    Per-key cooldown started explicitly after a successful action.

    Unlike RateLimiter.check, looking up the remaining time does not count
    as a hit; call mark() once the action has actually happened.
    """

    def __init__(self, cooldown_seconds: int, clock: Callable[[], float] | None = None) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock or time.monotonic
        self._last: dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def remaining(self, key: Hashable) -> int:
        """Whole seconds until the key is usable again (0 if ready)."""
        with self._lock:
            last = self._last.get(key)
            if last is None:
                return 0
            left = (last + self.cooldown_seconds) - self._clock()
            if left <= 0:
                del self._last[key]
                return 0
            return math.ceil(left)

    def check(self, key: Hashable) -> RateLimitResult:
        retry_after = self.remaining(key)
        return RateLimitResult(allowed=retry_after == 0, retry_after_seconds=retry_after)

    def mark(self, key: Hashable) -> None:
        with self._lock:
            self._last[key] = self._clock()

    def clear(self, key: Hashable | None = None) -> None:
        with self._lock:
            if key is None:
                self._last.clear()
            else:
                self._last.pop(key, None)


GLOBAL_RATE_LIMITER = RateLimiter()
