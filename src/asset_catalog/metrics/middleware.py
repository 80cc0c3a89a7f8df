"""Prometheus HTTP request metrics middleware for FastAPI.

Tracks ``catalog_http_requests_total`` (by method, route, status) and
``catalog_http_request_duration_seconds`` (by method, route). Requests are
labelled with the matched route template (``/api/v1/assets/get/{asset_id}``)
rather than the raw path so ids do not explode label cardinality.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from collections.abc import Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response

_SKIP_PATHS = frozenset({"/metrics"})
_UNMATCHED = "<unmatched>"


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", _UNMATCHED)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records request count and duration."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "catalog_http_requests",
            "Total HTTP requests",
            ("method", "route", "status_code"),
            registry=registry,
        )
        self._duration = Histogram(
            "catalog_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ("method", "route"),
            registry=registry,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[type-arg]
        """Time and count every request except the scrape endpoint."""
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start = time.monotonic()
        response: Response = await call_next(request)
        elapsed = time.monotonic() - start

        route = _route_label(request)
        self._requests.labels(
            method=request.method, route=route, status_code=str(response.status_code)
        ).inc()
        self._duration.labels(method=request.method, route=route).observe(elapsed)
        return response
