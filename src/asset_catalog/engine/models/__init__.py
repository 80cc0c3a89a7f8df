"""Catalog data models (SQLAlchemy ORM).

Importing this package registers every table on ``Base.metadata``.
"""

from asset_catalog.engine.models.api_key import ApiKey
from asset_catalog.engine.models.base import Base, TimestampMixin, utcnow
from asset_catalog.engine.models.catalog import Asset, AssetTag, AssetType, Tag

__all__ = [
    "ApiKey",
    "Asset",
    "AssetTag",
    "AssetType",
    "Base",
    "Tag",
    "TimestampMixin",
    "utcnow",
]
