"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from asset_catalog import __version__
from asset_catalog.api.middleware.cors import setup_cors
from asset_catalog.api.v1 import v1_router
from asset_catalog.config.settings import AppConfig
from asset_catalog.engine.client import CatalogEngine
from asset_catalog.errors.catalog_errors import CatalogError
from asset_catalog.errors.definitions import ErrInvalidInput
from asset_catalog.metrics.collector import CatalogMetrics
from asset_catalog.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Initialises the engine (datastore, tables, seeded types, bootstrap key)
    on startup and shuts it down on exit.
    """
    config: AppConfig = app.state.config
    engine = CatalogEngine(config, metrics=app.state.metrics)

    try:
        await engine.initialize()
        app.state.engine = engine
        yield
    finally:
        app.state.engine = None
        await engine.close()


def create_app(*, config: AppConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="asset-catalog",
        version=__version__,
        description="API-key gated asset catalog",
        debug=config.debug,
        lifespan=_lifespan,
    )

    # Store config and metrics on app.state for lifespan access
    app.state.config = config
    app.state.metrics = CatalogMetrics() if config.metrics.enabled else None

    # -- Middleware --
    setup_cors(app)
    if app.state.metrics is not None:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handlers --
    @app.exception_handler(CatalogError)
    async def _catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", ErrInvalidInput.message) if errors else ErrInvalidInput.message
        return JSONResponse(
            status_code=ErrInvalidInput.status_code,
            content={"code": ErrInvalidInput.code, "message": detail},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health(request: Request) -> dict[str, str]:
        engine: CatalogEngine | None = getattr(request.app.state, "engine", None)
        if engine is None:
            return {"status": "starting"}
        status = await engine.health_check()
        ok = all(v == "ok" for v in status.values())
        return {"status": "ok" if ok else "degraded", **status}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        metrics: CatalogMetrics | None = app.state.metrics
        body = generate_latest(metrics.registry) if metrics is not None else b""
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # -- Mount v1 API --
    app.include_router(v1_router)

    return app
