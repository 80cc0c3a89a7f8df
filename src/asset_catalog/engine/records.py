"""Plain records returned by the catalog services.

Services never hand ORM instances to callers: rows are copied into these
frozen dataclasses, and relations (asset -> tag names) are filled in by an
explicit batched query instead of lazy loading.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime  # noqa: TC003 - used at runtime by dataclasses.fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from asset_catalog.engine.models import ApiKey, AssetType, Tag


@dataclasses.dataclass(frozen=True)
class ApiKeyRecord:
    """Stored API key, without any secret material."""

    id: int
    description: str
    permission_level: int
    owner_ref: str | None
    rate_limit: int
    active: bool
    created_at: datetime
    last_used_at: datetime | None = None

    @classmethod
    def from_model(cls, row: ApiKey) -> ApiKeyRecord:
        return cls(
            id=row.id,
            description=row.description,
            permission_level=row.permission_level,
            owner_ref=row.owner_ref,
            rate_limit=row.rate_limit,
            active=row.active,
            created_at=row.created_at,
            last_used_at=row.last_used_at,
        )


@dataclasses.dataclass(frozen=True)
class Identity:
    """A validated caller.

    ``token`` is the presented secret; it is stable across calls with the
    same key and serves as the rate-limit bucket key.
    """

    key_id: int
    permission_level: int
    rate_limit: int
    token: str = dataclasses.field(repr=False)

    @property
    def rate_limit_key(self) -> str:
        return self.token


@dataclasses.dataclass(frozen=True)
class TagRecord:
    id: int
    name: str

    @classmethod
    def from_model(cls, row: Tag) -> TagRecord:
        return cls(id=row.id, name=row.name)


@dataclasses.dataclass(frozen=True)
class TypeRecord:
    id: int
    name: str

    @classmethod
    def from_model(cls, row: AssetType) -> TypeRecord:
        return cls(id=row.id, name=row.name)


@dataclasses.dataclass(frozen=True)
class AssetRecord:
    """Asset as seen by callers: type resolved to its name, tags to their names."""

    id: int
    name: str
    description: str
    type: str
    author: str
    material: str
    paste_link: str
    owner_ref: str
    approved: bool
    approved_by: str | None
    created_at: datetime
    updated_at: datetime
    tags: tuple[str, ...] = ()

    def with_tags(self, tags: list[str] | tuple[str, ...]) -> AssetRecord:
        """Return a copy carrying *tags*."""
        return dataclasses.replace(self, tags=tuple(tags))
