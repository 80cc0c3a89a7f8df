"""V1 asset type endpoints (read-only)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from asset_catalog.api.dependencies import get_engine, require_reader
from asset_catalog.api.v1.schemas import TypeResponse
from asset_catalog.engine.client import CatalogEngine  # noqa: TC001
from asset_catalog.engine.records import Identity  # noqa: TC001
from asset_catalog.errors.definitions import ErrTypeNotFound

router = APIRouter(prefix="/types", tags=["type"])


@router.get("")
async def list_types(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[dict]:
    types = await engine.catalog_store.list_types()
    return [TypeResponse(id=t.id, name=t.name).model_dump() for t in types]


@router.get("/{type_id}")
async def get_type(
    type_id: int,
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> dict:
    asset_type = await engine.catalog_store.get_type(type_id)
    if asset_type is None:
        raise ErrTypeNotFound
    return TypeResponse(id=asset_type.id, name=asset_type.name).model_dump()
