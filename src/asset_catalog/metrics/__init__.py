"""Metrics: Prometheus metrics collection and exposure."""

from __future__ import annotations

from asset_catalog.metrics.collector import CatalogMetrics, MetricsCollector

__all__ = ["CatalogMetrics", "MetricsCollector"]
