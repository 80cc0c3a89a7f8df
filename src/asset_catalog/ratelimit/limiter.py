"""Per-identity fixed-window rate limiter on top of ``limits``.

Each identity gets a window of ``window_seconds`` that opens on its first
request. Once the window has expired the next request starts a fresh one, so
an identity that has been idle always starts with its full budget. A burst
straddling two windows can admit up to ``2 * limit`` requests; that
approximation is accepted.
"""

from __future__ import annotations

import logging

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60
DEFAULT_LIMIT = 60

_NAMESPACE = "catalog"


class RateLimiter:
    """Fixed-window counter keyed by identity string.

    The counters live in *storage*, which the engine builds once at startup.
    ``MemoryStorage`` guards each counter with its own lock, so concurrent
    callers never admit more than the budget.
    """

    def __init__(
        self,
        storage: MemoryStorage,
        *,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._storage = storage
        self._strategy = FixedWindowRateLimiter(storage)
        self._window_seconds = window_seconds
        self._default_limit = default_limit

    @property
    def storage(self) -> MemoryStorage:
        """Return the shared counter storage."""
        return self._storage

    @property
    def default_limit(self) -> int:
        """Return the budget used when ``allow`` is called without one."""
        return self._default_limit

    def allow(self, identity: str, limit: int | None = None) -> bool:
        """Record one request for *identity* and report whether it is admitted.

        Args:
            identity: Stable per-caller key.
            limit: Requests allowed per window. Defaults to ``default_limit``.

        Returns:
            True if the request fits in the current window's budget.
        """
        budget = self._default_limit if limit is None else limit
        item = RateLimitItemPerSecond(budget, self._window_seconds, namespace=_NAMESPACE)
        if self._strategy.hit(item, identity):
            return True
        logger.debug("Rate limit exceeded (budget %d)", budget)
        return False

    def reset(self) -> None:
        """Forget every window."""
        self._storage.reset()
