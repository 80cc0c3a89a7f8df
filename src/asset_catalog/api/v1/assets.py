"""V1 asset endpoints.

Reads need any active key; creation, edits, approval and deletion need an
administrative key.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from asset_catalog.api.dependencies import get_engine, require_admin, require_reader
from asset_catalog.api.v1.schemas import (
    ApproveAssetRequest,
    AssetCreateRequest,
    AssetIdRequest,
    AssetResponse,
    OutcomeResponse,
    RawDataResponse,
    UpdateMaterialRequest,
    UpdatePasteLinkRequest,
    UpdateTagsRequest,
)
from asset_catalog.engine.client import CatalogEngine  # noqa: TC001
from asset_catalog.engine.records import AssetRecord, Identity  # noqa: TC001
from asset_catalog.errors.definitions import ErrAssetFrozen, ErrAssetNotFound, ErrMissingQuery
from asset_catalog.errors.outcomes import Outcome, raise_for_outcome

router = APIRouter(prefix="/assets", tags=["asset"])

MATCH_ANY = "any"
MATCH_ALL = "all"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _asset_resp(a: AssetRecord) -> dict:
    return AssetResponse(
        id=a.id,
        name=a.name,
        description=a.description,
        type=a.type,
        author=a.author,
        material=a.material,
        paste_link=a.paste_link,
        approved=a.approved,
        approved_by=a.approved_by,
        created_at=a.created_at,
        updated_at=a.updated_at,
        tags=list(a.tags),
    ).model_dump(mode="json")


def _ok() -> dict:
    return OutcomeResponse(status=Outcome.OK.value).model_dump()


def _parse_tag_ids(raw: str) -> list[int]:
    """Parse ``"1,2,3"``; blanks and non-numeric entries are skipped."""
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("")
async def list_assets(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[dict]:
    """All approved assets."""
    return [_asset_resp(a) for a in await engine.query_engine.get_all()]


@router.get("/get/{asset_id}")
async def get_asset(
    asset_id: int,
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> dict:
    """Fetch one asset by id, approved or not."""
    asset = await engine.query_engine.get_by_id(asset_id)
    if asset is None:
        raise ErrAssetNotFound
    return _asset_resp(asset)


@router.get("/raw/{asset_id}")
async def get_raw_data(
    asset_id: int,
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> dict:
    raw = await engine.query_engine.get_raw(asset_id)
    if raw is None:
        raise ErrAssetNotFound
    return RawDataResponse(raw_data=raw).model_dump()


@router.get("/search")
async def search_assets(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    name: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict]:
    """Case-insensitive substring search on approved asset names."""
    if not name:
        raise ErrMissingQuery
    if limit is None:
        limit = engine.config.catalog.search_limit
    results = await engine.query_engine.search_by_name(name, limit)
    return [_asset_resp(a) for a in results]


@router.get("/filter")
async def filter_assets(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    tags: str = "",
    match: str = MATCH_ANY,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict]:
    """Approved assets carrying any (default) or all of the listed tags.

    Unknown *match* values fall back to ``any``.
    """
    results = await engine.query_engine.filter_by_tags(
        _parse_tag_ids(tags),
        limit,
        require_all=match.lower() == MATCH_ALL,
    )
    return [_asset_resp(a) for a in results]


@router.get("/latest")
async def latest_assets(
    _: Annotated[Identity, Depends(require_reader)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict]:
    if limit is None:
        limit = engine.config.catalog.latest_limit
    return [_asset_resp(a) for a in await engine.query_engine.get_latest(limit)]


# ---------------------------------------------------------------------------
# Admin mutations
# ---------------------------------------------------------------------------


@router.post("/create", status_code=201)
async def create_asset(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: AssetCreateRequest,
) -> dict:
    """Create a new, unapproved asset."""
    asset = await engine.catalog_store.create_asset(
        name=body.name,
        description=body.description,
        type_id=body.type_id,
        author=body.author,
        material=body.material,
        paste_link=body.paste_link,
        raw_data=body.raw_data,
        owner_ref=body.owner_ref,
        tag_ids=body.tag_ids,
    )
    return _asset_resp(asset)


@router.patch("/update/material")
async def update_material(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: UpdateMaterialRequest,
) -> dict:
    outcome = await engine.catalog_store.update_material(body.id, body.material)
    raise_for_outcome(outcome, rejected=ErrAssetFrozen)
    return _ok()


@router.patch("/update/pastelink")
async def update_paste_link(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: UpdatePasteLinkRequest,
) -> dict:
    outcome = await engine.catalog_store.update_paste_link(body.id, body.paste_link)
    raise_for_outcome(outcome, rejected=ErrAssetFrozen)
    return _ok()


@router.patch("/update/tags")
async def update_tags(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: UpdateTagsRequest,
) -> dict:
    """Replace the tag set. Allowed on approved assets."""
    raise_for_outcome(await engine.catalog_store.update_tags(body.id, body.tags))
    return _ok()


@router.patch("/approve")
async def approve_asset(
    ctx: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: ApproveAssetRequest,
) -> dict:
    """Approve an asset. A second approval answers 409 ``already-approved``."""
    approved_by = body.approved_by or f"key:{ctx.key_id}"
    raise_for_outcome(await engine.catalog_store.approve(body.id, approved_by))
    return _ok()


@router.delete("/delete")
async def delete_asset(
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: AssetIdRequest,
) -> dict:
    raise_for_outcome(await engine.catalog_store.delete_asset(body.id))
    return _ok()
