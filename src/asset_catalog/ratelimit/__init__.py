"""Fixed-window, per-identity rate limiting."""

from __future__ import annotations

from asset_catalog.ratelimit.limiter import RateLimiter

__all__ = ["RateLimiter"]
