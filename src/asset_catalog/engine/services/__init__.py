"""Catalog services: key store, catalog store and query engine."""

from asset_catalog.engine.services.catalog_store import CatalogStore
from asset_catalog.engine.services.key_store import PERMISSION_ADMIN, PERMISSION_READ, KeyStore
from asset_catalog.engine.services.query_engine import QueryEngine

__all__ = [
    "PERMISSION_ADMIN",
    "PERMISSION_READ",
    "CatalogStore",
    "KeyStore",
    "QueryEngine",
]
