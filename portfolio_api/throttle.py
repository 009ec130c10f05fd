"""
Fixed-window attempt limiter used for logins and public submissions.

Backed by the ``limits`` package: counters live in process memory for
tests/local runs and in Redis when one is configured.
"""

from __future__ import annotations

import logging

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class AttemptLimiter:
    """Counts attempts per key; a key is blocked once the window is full."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        storage_uri: str = "memory://",
        namespace: str = "attempts",
    ):
        self.item = RateLimitItemPerSecond(
            max_attempts, window_seconds, namespace=namespace
        )
        self.storage = storage_from_string(storage_uri)
        self._limiter = FixedWindowRateLimiter(self.storage)

    @property
    def max_attempts(self) -> int:
        return self.item.amount

    def is_blocked(self, key: str) -> bool:
        return not self._limiter.test(self.item, key)

    def hit(self, key: str) -> int:
        """Record one attempt and return the attempts used in this window."""
        if not self._limiter.hit(self.item, key):
            logger.debug("Attempt limit reached for %s", key)
        stats = self._limiter.get_window_stats(self.item, key)
        return self.max_attempts - stats.remaining

    def reset(self, key: str) -> None:
        self._limiter.clear(self.item, key)
