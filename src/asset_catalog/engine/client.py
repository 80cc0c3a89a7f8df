"""CatalogEngine: central engine client owning all services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from limits.storage import MemoryStorage

    from asset_catalog.config.settings import AppConfig
    from asset_catalog.datastore.client import Datastore
    from asset_catalog.engine.services.catalog_store import CatalogStore
    from asset_catalog.engine.services.key_store import KeyStore
    from asset_catalog.engine.services.query_engine import QueryEngine
    from asset_catalog.metrics.collector import CatalogMetrics
    from asset_catalog.ratelimit.limiter import RateLimiter

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class CatalogEngine:
    """Central engine that owns the datastore, rate limiter and services.

    Lifecycle::

        engine = CatalogEngine(config)
        await engine.initialize()
        ...
        await engine.close()
    """

    def __init__(self, config: AppConfig, *, metrics: CatalogMetrics | None = None) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            metrics: Shared metrics. Created on initialize when omitted and
                metrics are enabled.
        """
        self._config = config
        self._initialized = False
        self._external_metrics = metrics

        # Infrastructure components
        self._datastore: Datastore | None = None
        self._rate_limit_storage: MemoryStorage | None = None
        self._rate_limiter: RateLimiter | None = None
        self._metrics: CatalogMetrics | None = None

        # Services
        self._key_store: KeyStore | None = None
        self._catalog_store: CatalogStore | None = None
        self._query_engine: QueryEngine | None = None

    async def initialize(self) -> None:
        """Open the datastore, create tables, seed types and start services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        # Import here to avoid circular deps
        from limits.storage import MemoryStorage

        from asset_catalog.datastore.client import Datastore
        from asset_catalog.datastore.migrations import run_auto_migrate, seed_types
        from asset_catalog.engine.services.catalog_store import CatalogStore
        from asset_catalog.engine.services.key_store import PERMISSION_ADMIN, KeyStore
        from asset_catalog.engine.services.query_engine import QueryEngine
        from asset_catalog.metrics.collector import CatalogMetrics
        from asset_catalog.ratelimit.limiter import RateLimiter

        self._datastore = Datastore(self._config.db)
        await self._datastore.open()
        await run_auto_migrate(self._datastore.engine)
        await seed_types(self._datastore.engine, self._config.catalog.seed_types)

        if self._external_metrics is not None:
            self._metrics = self._external_metrics
        elif self._config.metrics.enabled:
            self._metrics = CatalogMetrics()

        self._rate_limit_storage = MemoryStorage()
        self._rate_limiter = RateLimiter(
            self._rate_limit_storage,
            window_seconds=self._config.rate_limit.window_seconds,
            default_limit=self._config.rate_limit.default_limit,
        )

        self._key_store = KeyStore(
            self._datastore,
            default_rate_limit=self._config.keys.default_rate_limit,
            issue_attempts=self._config.keys.issue_attempts,
        )
        self._catalog_store = CatalogStore(self._datastore)
        self._query_engine = QueryEngine(self._datastore, metrics=self._metrics)

        if self._config.admin_key:
            await self._key_store.ensure_key(
                self._config.admin_key,
                description="bootstrap admin key",
                permission_level=PERMISSION_ADMIN,
            )

        self._initialized = True
        logger.info("Catalog engine initialized")

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        self._key_store = None
        self._catalog_store = None
        self._query_engine = None
        self._rate_limiter = None
        self._rate_limit_storage = None
        self._metrics = None

        if self._datastore is not None:
            await self._datastore.close()
            self._datastore = None

        self._initialized = False
        logger.info("Catalog engine shut down")

    @property
    def is_initialized(self) -> bool:
        """Check if the engine is initialized."""
        return self._initialized

    @property
    def config(self) -> AppConfig:
        """Get the application configuration."""
        return self._config

    @property
    def datastore(self) -> Datastore:
        """Get the datastore instance.

        Raises:
            RuntimeError: If engine not initialized.
        """
        if self._datastore is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._datastore

    @property
    def rate_limiter(self) -> RateLimiter:
        """Get the per-key rate limiter."""
        if self._rate_limiter is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._rate_limiter

    @property
    def key_store(self) -> KeyStore:
        """Get the API key store."""
        if self._key_store is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._key_store

    @property
    def catalog_store(self) -> CatalogStore:
        """Get the asset/tag/type store."""
        if self._catalog_store is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._catalog_store

    @property
    def query_engine(self) -> QueryEngine:
        """Get the asset query engine."""
        if self._query_engine is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._query_engine

    @property
    def metrics(self) -> CatalogMetrics | None:
        """Get the catalog metrics (None if disabled or not initialized)."""
        return self._metrics

    async def health_check(self) -> dict[str, str]:
        """Check health status of all engine components.

        Returns:
            Dictionary with component statuses ('ok', 'error', 'not_initialized').
        """
        status = {
            "engine": "ok" if self._initialized else "not_initialized",
            "datastore": "unknown",
            "rate_limiter": "unknown",
        }

        if self._initialized:
            status["datastore"] = (
                "ok" if self._datastore is not None and self._datastore.is_open else "error"
            )
            status["rate_limiter"] = "ok" if self._rate_limiter is not None else "error"

        return status
