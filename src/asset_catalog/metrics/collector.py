"""Metrics collector: Prometheus counters and histograms.

- ``catalog_query_duration_seconds`` histogram, by query operation
- ``catalog_auth_denied_total`` counter, by required permission tier
- ``catalog_rate_limited_total`` counter
- ``catalog_keys_issued_total`` counter
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "catalog"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`CatalogMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class CatalogMetrics:
    """High-level catalog metrics."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._query = self._collector.histogram(
            f"{_PREFIX}_query_duration_seconds",
            "Duration of catalog query operations",
            ("operation",),
        )
        self._auth_denied = self._collector.counter(
            f"{_PREFIX}_auth_denied",
            "Requests rejected by API key validation",
            ("tier",),
        )
        self._rate_limited = self._collector.counter(
            f"{_PREFIX}_rate_limited",
            "Requests rejected by the rate limiter",
        )
        self._keys_issued = self._collector.counter(
            f"{_PREFIX}_keys_issued",
            "API keys issued",
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_auth_denied(self, tier: int) -> None:
        self._auth_denied.labels(tier=str(tier)).inc()

    def record_rate_limited(self) -> None:
        self._rate_limited.inc()

    def record_key_issued(self) -> None:
        self._keys_issued.inc()

    @contextmanager
    def track_query(self, operation: str) -> Iterator[None]:
        """Track the duration of a query operation."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._query.labels(operation=operation).observe(time.monotonic() - start)
