"""V1 REST API routes.

Combines all sub-routers under the ``/api/v1`` prefix.
"""

from fastapi import APIRouter

from asset_catalog.api.v1.api_keys import router as api_keys_router
from asset_catalog.api.v1.assets import router as assets_router
from asset_catalog.api.v1.tags import router as tags_router
from asset_catalog.api.v1.asset_types import router as types_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(assets_router)
v1_router.include_router(tags_router)
v1_router.include_router(types_router)
v1_router.include_router(api_keys_router)

__all__ = ["v1_router"]
