"""V1 API key endpoints (admin only).

Keys issued here are read-level. Administrative keys come from the
bootstrap configuration only.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from asset_catalog.api.dependencies import get_engine, require_admin
from asset_catalog.api.v1.schemas import (
    ApiKeyGenerateRequest,
    ApiKeyGenerateResponse,
    ApiKeyResponse,
)
from asset_catalog.engine.client import CatalogEngine  # noqa: TC001
from asset_catalog.engine.records import ApiKeyRecord, Identity  # noqa: TC001
from asset_catalog.engine.services.key_store import PERMISSION_READ
from asset_catalog.errors.definitions import ErrApiKeyNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api-key", tags=["api-key"])


def _key_resp(k: ApiKeyRecord) -> dict:
    return ApiKeyResponse(
        id=k.id,
        description=k.description,
        permission_level=k.permission_level,
        owner_ref=k.owner_ref,
        rate_limit=k.rate_limit,
        active=k.active,
        created_at=k.created_at,
        last_used_at=k.last_used_at,
    ).model_dump(mode="json")


@router.get("/get/{key_id}")
async def get_api_key(
    key_id: int,
    _: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> dict:
    """Key metadata by id. The secret is never returned."""
    key = await engine.key_store.get_by_id(key_id)
    if key is None:
        raise ErrApiKeyNotFound
    return _key_resp(key)


@router.post("/generate", status_code=201)
async def generate_api_key(
    ctx: Annotated[Identity, Depends(require_admin)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    body: ApiKeyGenerateRequest,
) -> dict:
    """Issue a read-level key and return its raw secret exactly once."""
    record, secret = await engine.key_store.issue(
        body.description,
        PERMISSION_READ,
        owner_ref=body.owner_ref,
        rate_limit=body.rate_limit,
        active=body.active,
    )
    if engine.metrics is not None:
        engine.metrics.record_key_issued()
    logger.info("Key %d issued by key %d", record.id, ctx.key_id)
    return ApiKeyGenerateResponse(api_key=secret).model_dump()
