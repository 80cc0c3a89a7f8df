"""QueryEngine: read paths over the catalog.

Public searches only ever see approved assets. Results are ordered newest
first (``created_at DESC, id DESC`` so equal timestamps still sort the same
way every time) and tag names are attached with one batched query per call.
"""

from __future__ import annotations

from contextlib import nullcontext
from typing import TYPE_CHECKING

from sqlalchemy import distinct, exists, func, select

from asset_catalog.engine.models import Asset, AssetTag
from asset_catalog.engine.services.associations import (
    asset_select,
    records_with_tags,
    unique_ids,
)
from asset_catalog.errors.definitions import ErrInvalidLimit

if TYPE_CHECKING:
    from collections.abc import Iterable
    from contextlib import AbstractContextManager

    from sqlalchemy import Select

    from asset_catalog.datastore.client import Datastore
    from asset_catalog.engine.records import AssetRecord
    from asset_catalog.metrics.collector import CatalogMetrics

DEFAULT_LATEST_LIMIT = 10

_NEWEST_FIRST = (Asset.created_at.desc(), Asset.id.desc())


def _check_limit(limit: int | None) -> None:
    if limit is not None and (isinstance(limit, bool) or limit < 1):
        raise ErrInvalidLimit


def _like_pattern(query: str) -> str:
    """Lower-cased ``%query%`` with LIKE wildcards escaped."""
    escaped = query.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class QueryEngine:
    """Name search, latest-N and tag filtering over approved assets."""

    def __init__(self, datastore: Datastore, metrics: CatalogMetrics | None = None) -> None:
        self._ds = datastore
        self._metrics = metrics

    def _track(self, operation: str) -> AbstractContextManager[None]:
        if self._metrics is None:
            return nullcontext()
        return self._metrics.track_query(operation)

    async def _fetch(self, stmt: Select) -> list[AssetRecord]:
        async with self._ds.session() as session:
            rows = (await session.execute(stmt)).all()
            return await records_with_tags(session, rows)

    # ------------------------------------------------------------------
    # Direct lookups
    # ------------------------------------------------------------------

    async def get_all(self) -> list[AssetRecord]:
        """All approved assets with their tags."""
        with self._track("get_all"):
            stmt = asset_select().where(Asset.approved.is_(True)).order_by(*_NEWEST_FIRST)
            return await self._fetch(stmt)

    async def get_by_id(self, asset_id: int) -> AssetRecord | None:
        """Fetch one asset regardless of approval state."""
        with self._track("get_by_id"):
            records = await self._fetch(asset_select().where(Asset.id == asset_id))
            return records[0] if records else None

    async def get_raw(self, asset_id: int) -> str | None:
        """Return only the raw payload of an asset."""
        with self._track("get_raw"):
            async with self._ds.session() as session:
                result = await session.execute(select(Asset.raw_data).where(Asset.id == asset_id))
                return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    async def search_by_name(self, query: str, limit: int | None = None) -> list[AssetRecord]:
        """Case-insensitive substring match on the asset name."""
        _check_limit(limit)
        with self._track("search_by_name"):
            stmt = (
                asset_select()
                .where(
                    Asset.approved.is_(True),
                    func.lower(Asset.name).like(_like_pattern(query), escape="\\"),
                )
                .order_by(*_NEWEST_FIRST)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return await self._fetch(stmt)

    async def get_latest(self, limit: int = DEFAULT_LATEST_LIMIT) -> list[AssetRecord]:
        """Newest approved assets, at most *limit* of them."""
        _check_limit(limit)
        with self._track("get_latest"):
            stmt = (
                asset_select()
                .where(Asset.approved.is_(True))
                .order_by(*_NEWEST_FIRST)
                .limit(limit)
            )
            return await self._fetch(stmt)

    async def filter_by_tags(
        self,
        tag_ids: Iterable[int],
        limit: int | None = None,
        require_all: bool = False,
    ) -> list[AssetRecord]:
        """Approved assets carrying the requested tags.

        Args:
            tag_ids: Tags to match. Duplicates are ignored. An empty set
                matches nothing and returns without querying.
            limit: Optional cap on the number of results.
            require_all: True for AND (every tag), False for OR (any tag).
        """
        _check_limit(limit)
        wanted = unique_ids(tag_ids)
        if not wanted:
            return []

        with self._track("filter_by_tags"):
            if require_all:
                matching = (
                    select(AssetTag.asset_id)
                    .where(AssetTag.tag_id.in_(wanted))
                    .group_by(AssetTag.asset_id)
                    .having(func.count(distinct(AssetTag.tag_id)) == len(wanted))
                )
                condition = Asset.id.in_(matching)
            else:
                condition = exists().where(
                    AssetTag.asset_id == Asset.id, AssetTag.tag_id.in_(wanted)
                )

            stmt = (
                asset_select()
                .where(Asset.approved.is_(True), condition)
                .order_by(*_NEWEST_FIRST)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return await self._fetch(stmt)
