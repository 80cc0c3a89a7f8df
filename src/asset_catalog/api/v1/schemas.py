"""V1 API request/response Pydantic schemas.

These define the HTTP contract only. Endpoint code maps service records
(frozen dataclasses) onto the response models; ORM rows never reach here.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime

from pydantic import BaseModel, Field

from asset_catalog.engine.models.catalog import (
    AUTHOR_MAX,
    MATERIAL_MAX,
    NAME_MAX,
    OWNER_REF_MAX,
    PASTE_LINK_MAX,
)

# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error body: ``{"code": "...", "message": "..."}``."""

    code: str
    message: str


class OutcomeResponse(BaseModel):
    """Body of a successful mutation."""

    status: str


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class AssetResponse(BaseModel):
    id: int
    name: str
    description: str
    type: str
    author: str
    material: str
    paste_link: str
    approved: bool
    approved_by: str | None = None
    created_at: datetime
    updated_at: datetime
    tags: list[str] = Field(default_factory=list)


class RawDataResponse(BaseModel):
    raw_data: str


class AssetCreateRequest(BaseModel):
    """POST /api/v1/assets/create"""

    name: str = Field(min_length=1, max_length=NAME_MAX)
    description: str = ""
    type_id: int
    author: str = Field(min_length=1, max_length=AUTHOR_MAX)
    material: str = Field(min_length=1, max_length=MATERIAL_MAX)
    paste_link: str = Field(min_length=1, max_length=PASTE_LINK_MAX)
    raw_data: str = ""
    owner_ref: str = Field(min_length=1, max_length=OWNER_REF_MAX)
    tag_ids: list[int] = Field(default_factory=list)


class AssetIdRequest(BaseModel):
    """DELETE /api/v1/assets/delete"""

    id: int


class ApproveAssetRequest(BaseModel):
    """PATCH /api/v1/assets/approve"""

    id: int
    approved_by: str | None = Field(None, max_length=OWNER_REF_MAX)


class UpdateMaterialRequest(BaseModel):
    id: int
    material: str


class UpdatePasteLinkRequest(BaseModel):
    id: int
    paste_link: str


class UpdateTagsRequest(BaseModel):
    id: int
    tags: list[int]


# ---------------------------------------------------------------------------
# Tags / Types
# ---------------------------------------------------------------------------


class TagResponse(BaseModel):
    id: int
    name: str


class TypeResponse(BaseModel):
    id: int
    name: str


class TagCreateRequest(BaseModel):
    """POST /api/v1/tags: the name is validated by the store."""

    name: str


class TagRenameRequest(BaseModel):
    """PATCH /api/v1/tags"""

    id: int
    name: str


class TagDeleteRequest(BaseModel):
    """DELETE /api/v1/tags"""

    id: int


# ---------------------------------------------------------------------------
# API keys
# ---------------------------------------------------------------------------


class ApiKeyResponse(BaseModel):
    """Stored key metadata. Never includes the secret or its fingerprint."""

    id: int
    description: str
    permission_level: int
    owner_ref: str | None = None
    rate_limit: int
    active: bool
    created_at: datetime
    last_used_at: datetime | None = None


class ApiKeyGenerateRequest(BaseModel):
    """POST /api/v1/api-key/generate"""

    description: str
    owner_ref: str | None = Field(None, max_length=OWNER_REF_MAX)
    rate_limit: int | None = Field(None, ge=0)
    active: bool = True


class ApiKeyGenerateResponse(BaseModel):
    """The raw secret, shown exactly once."""

    api_key: str
