"""V1 tag endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from asset_catalog.api.dependencies import get_engine, require_admin, require_reader
from asset_catalog.api.v1.schemas import (
    OutcomeResponse,
    TagCreateRequest,
    TagDeleteRequest,
    TagRenameRequest,
    TagResponse,
)
from asset_catalog.engine.client import CatalogEngine  # noqa: TC001
from asset_catalog.engine.records import Identity  # noqa: TC001
from asset_catalog.errors.definitions import ErrTagNotFound
from asset_catalog.errors.outcomes import Outcome, raise_for_outcome

router = APIRouter(prefix="/tags", tags=["tag"])


@router.get("")
async def list_tags(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[dict]:
    tags = await engine.catalog_store.list_tags()
    return [TagResponse(id=t.id, name=t.name).model_dump() for t in tags]


@router.get("/{tag_id}")
async def get_tag(
    tag_id: int,
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> dict:
    tag = await engine.catalog_store.get_tag(tag_id)
    if tag is None:
        raise ErrTagNotFound
    return TagResponse(id=tag.id, name=tag.name).model_dump()


@router.post("", status_code=201)
async def create_tag(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: TagCreateRequest,
) -> dict:
    """Create a tag; 409 if the name is taken."""
    raise_for_outcome(await engine.catalog_store.create_tag(body.name))
    return OutcomeResponse(status=Outcome.OK.value).model_dump()


@router.patch("")
async def rename_tag(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: TagRenameRequest,
) -> dict:
    outcome = await engine.catalog_store.rename_tag(body.id, body.name)
    raise_for_outcome(outcome, not_found=ErrTagNotFound)
    return OutcomeResponse(status=Outcome.OK.value).model_dump()


@router.delete("")
async def delete_tag(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: TagDeleteRequest,
) -> dict:
    """Delete a tag and detach it from every asset."""
    outcome = await engine.catalog_store.delete_tag(body.id)
    raise_for_outcome(outcome, not_found=ErrTagNotFound)
    return OutcomeResponse(status=Outcome.OK.value).model_dump()
