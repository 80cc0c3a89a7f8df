"""Asset <-> tag association helpers shared by the store and the query engine.

All helpers take an open session so they run inside the caller's transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite

from asset_catalog.engine.models import Asset, AssetTag, AssetType, Tag
from asset_catalog.engine.records import AssetRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


def asset_select() -> Select[tuple[Asset, str]]:
    """Base query yielding ``(Asset, type_name)`` rows."""
    return select(Asset, AssetType.name).join(AssetType, AssetType.id == Asset.type_id)


def to_record(asset: Asset, type_name: str, tags: Sequence[str] = ()) -> AssetRecord:
    """Copy an ORM asset row into an :class:`AssetRecord`."""
    return AssetRecord(
        id=asset.id,
        name=asset.name,
        description=asset.description,
        type=type_name,
        author=asset.author,
        material=asset.material,
        paste_link=asset.paste_link,
        owner_ref=asset.owner_ref,
        approved=asset.approved,
        approved_by=asset.approved_by,
        created_at=asset.created_at,
        updated_at=asset.updated_at,
        tags=tuple(tags),
    )


def unique_ids(ids: Iterable[int]) -> list[int]:
    """Drop duplicates and non-positive ids, keeping first-seen order."""
    return [i for i in dict.fromkeys(ids) if i > 0]


async def existing_tag_ids(session: AsyncSession, tag_ids: Iterable[int]) -> list[int]:
    """Return the subset of *tag_ids* that resolve to stored tags, in input order."""
    wanted = unique_ids(tag_ids)
    if not wanted:
        return []
    result = await session.execute(select(Tag.id).where(Tag.id.in_(wanted)))
    found = set(result.scalars().all())
    return [i for i in wanted if i in found]


def _insert_ignore(session: AsyncSession) -> Any:
    """``INSERT ... ON CONFLICT DO NOTHING`` for the session's dialect."""
    dialect = session.bind.dialect.name if session.bind is not None else "sqlite"
    insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
    return insert(AssetTag.__table__).on_conflict_do_nothing()


async def attach_tags(session: AsyncSession, asset_id: int, tag_ids: Iterable[int]) -> list[int]:
    """Associate *asset_id* with every existing tag in *tag_ids*.

    Unknown tag ids are dropped silently and existing pairs are left alone.

    Returns:
        The tag ids that were resolved.
    """
    valid = await existing_tag_ids(session, tag_ids)
    if valid:
        await session.execute(
            _insert_ignore(session),
            [{"asset_id": asset_id, "tag_id": tag_id} for tag_id in valid],
        )
    return valid


async def detach_all_tags(session: AsyncSession, asset_id: int) -> None:
    """Remove every association of *asset_id*."""
    await session.execute(delete(AssetTag).where(AssetTag.asset_id == asset_id))


async def load_tag_names(
    session: AsyncSession, asset_ids: Iterable[int]
) -> dict[int, list[str]]:
    """Resolve tag names for many assets with a single query.

    Returns:
        Mapping of asset id -> tag names sorted by name. Assets without tags
        are absent from the mapping.
    """
    ids = list(dict.fromkeys(asset_ids))
    if not ids:
        return {}
    stmt = (
        select(AssetTag.asset_id, Tag.name)
        .join(Tag, Tag.id == AssetTag.tag_id)
        .where(AssetTag.asset_id.in_(ids))
        .order_by(AssetTag.asset_id, Tag.name)
    )
    names: dict[int, list[str]] = {}
    for asset_id, tag_name in (await session.execute(stmt)).all():
        names.setdefault(asset_id, []).append(tag_name)
    return names


async def records_with_tags(
    session: AsyncSession, rows: Sequence[Any]
) -> list[AssetRecord]:
    """Turn ``(Asset, type_name)`` rows into records with batched tag names."""
    names = await load_tag_names(session, (asset.id for asset, _ in rows))
    return [to_record(asset, type_name, names.get(asset.id, ())) for asset, type_name in rows]
