"""CatalogStore: asset, tag and type persistence.

Every public method runs in exactly one transaction, so multi-step mutations
(insert asset then associate tags, replace a tag set) are never partially
visible. Mutations report an :class:`~asset_catalog.errors.outcomes.Outcome`;
only malformed input raises, and it does so before storage is touched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from asset_catalog.engine.models import Asset, AssetType, Tag, utcnow
from asset_catalog.engine.models.catalog import (
    AUTHOR_MAX,
    MATERIAL_MAX,
    NAME_MAX,
    OWNER_REF_MAX,
    PASTE_LINK_MAX,
    TAG_NAME_MAX,
)
from asset_catalog.engine.records import AssetRecord, TagRecord, TypeRecord
from asset_catalog.engine.services.associations import (
    attach_tags,
    detach_all_tags,
    load_tag_names,
    to_record,
)
from asset_catalog.errors.catalog_errors import InvalidInputError
from asset_catalog.errors.definitions import ErrInvalidTagName, ErrTypeNotFound
from asset_catalog.errors.outcomes import Outcome

if TYPE_CHECKING:
    from collections.abc import Iterable

    from asset_catalog.datastore.client import Datastore

logger = logging.getLogger(__name__)


def _check_text(
    field: str, value: str, max_len: int | None = None, *, required: bool = True
) -> str:
    if not isinstance(value, str):
        msg = f"{field} must be a string"
        raise InvalidInputError(msg, code="invalid-field")
    if required and not value.strip():
        msg = f"{field} is required"
        raise InvalidInputError(msg, code="missing-field")
    if max_len is not None and len(value) > max_len:
        msg = f"{field} cannot exceed {max_len} characters"
        raise InvalidInputError(msg, code="field-too-long")
    return value


def _check_tag_name(name: str) -> str:
    if not isinstance(name, str):
        raise ErrInvalidTagName
    name = name.strip()
    if not name or len(name) > TAG_NAME_MAX:
        raise ErrInvalidTagName
    return name


class CatalogStore:
    """Data access and mutations for assets, tags and types."""

    def __init__(self, datastore: Datastore) -> None:
        self._ds = datastore

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    async def create_asset(
        self,
        *,
        name: str,
        description: str,
        type_id: int,
        author: str,
        material: str,
        paste_link: str,
        raw_data: str,
        owner_ref: str,
        tag_ids: Iterable[int] = (),
    ) -> AssetRecord:
        """Insert a new, unapproved asset and associate it with existing tags.

        Tag ids that do not resolve are dropped without error.

        Returns:
            The stored asset with the resolved tag names attached.

        Raises:
            InvalidInputError: If a field is missing or too long.
            CatalogError: ``ErrTypeNotFound`` if *type_id* does not exist.
        """
        _check_text("name", name, NAME_MAX)
        _check_text("author", author, AUTHOR_MAX)
        _check_text("material", material, MATERIAL_MAX)
        _check_text("paste_link", paste_link, PASTE_LINK_MAX)
        _check_text("owner_ref", owner_ref, OWNER_REF_MAX)
        _check_text("description", description, required=False)
        _check_text("raw_data", raw_data, required=False)
        tag_ids = list(tag_ids)

        async with self._ds.transaction() as session:
            asset_type = await session.get(AssetType, type_id)
            if asset_type is None:
                raise ErrTypeNotFound

            now = utcnow()
            asset = Asset(
                name=name,
                description=description,
                type_id=type_id,
                author=author,
                material=material,
                paste_link=paste_link,
                raw_data=raw_data,
                owner_ref=owner_ref,
                approved=False,
                created_at=now,
                updated_at=now,
            )
            session.add(asset)
            await session.flush()

            await attach_tags(session, asset.id, tag_ids)
            names = await load_tag_names(session, [asset.id])
            record = to_record(asset, asset_type.name, names.get(asset.id, ()))

        logger.info("Created asset %d (%s)", record.id, record.name)
        return record

    async def delete_asset(self, asset_id: int) -> Outcome:
        """Delete an asset; its tag associations go with it."""
        async with self._ds.transaction() as session:
            asset = await session.get(Asset, asset_id)
            if asset is None:
                return Outcome.NOT_FOUND
            await session.delete(asset)

        logger.info("Deleted asset %d", asset_id)
        return Outcome.OK

    async def approve(self, asset_id: int, approved_by: str | None = None) -> Outcome:
        """Mark an asset approved, freezing its material and paste link.

        Returns:
            ``OK`` on the first approval, ``ALREADY_APPROVED`` afterwards,
            ``NOT_FOUND`` if the asset does not exist.
        """
        if approved_by is not None:
            _check_text("approved_by", approved_by, OWNER_REF_MAX, required=False)
        outcome = await self._update_unapproved(
            asset_id, approved=True, approved_by=approved_by
        )
        if outcome is Outcome.OK:
            logger.info("Approved asset %d", asset_id)
        return outcome

    async def update_material(self, asset_id: int, material: str) -> Outcome:
        """Change the material of an unapproved asset (``FROZEN`` once approved)."""
        _check_text("material", material, MATERIAL_MAX)
        return await self._update_unapproved(asset_id, material=material)

    async def update_paste_link(self, asset_id: int, paste_link: str) -> Outcome:
        """Change the paste link of an unapproved asset (``FROZEN`` once approved)."""
        _check_text("paste_link", paste_link, PASTE_LINK_MAX)
        return await self._update_unapproved(asset_id, paste_link=paste_link)

    async def update_tags(self, asset_id: int, tag_ids: Iterable[int]) -> Outcome:
        """Replace the full tag set of an asset.

        Unlike material and paste link, tags stay editable after approval.
        """
        tag_ids = list(tag_ids)
        async with self._ds.transaction() as session:
            asset = await session.get(Asset, asset_id)
            if asset is None:
                return Outcome.NOT_FOUND
            await detach_all_tags(session, asset_id)
            await attach_tags(session, asset_id, tag_ids)
            asset.updated_at = utcnow()
        return Outcome.OK

    async def _update_unapproved(self, asset_id: int, **values: object) -> Outcome:
        """Apply *values* only while the asset is still unapproved.

        The ``approved = false`` guard in the UPDATE makes this a
        compare-and-set: a concurrent approval wins and this call reports
        ``ALREADY_APPROVED``.
        """
        async with self._ds.transaction() as session:
            asset = await session.get(Asset, asset_id)
            if asset is None:
                return Outcome.NOT_FOUND
            if asset.approved:
                return Outcome.ALREADY_APPROVED
            result = await session.execute(
                update(Asset)
                .where(Asset.id == asset_id, Asset.approved.is_(False))
                .values(updated_at=utcnow(), **values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:  # type: ignore[union-attr]
                return Outcome.ALREADY_APPROVED
        return Outcome.OK

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def create_tag(self, name: str) -> Outcome:
        """Create a tag. ``CONFLICT`` if the name is taken."""
        name = _check_tag_name(name)
        try:
            async with self._ds.transaction() as session:
                taken = await session.execute(select(Tag.id).where(Tag.name == name))
                if taken.first() is not None:
                    logger.debug("Tag name %r already in use", name)
                    return Outcome.CONFLICT
                session.add(Tag(name=name))
        except IntegrityError:
            # Lost a race with a concurrent insert of the same name.
            logger.debug("Tag name %r already in use", name)
            return Outcome.CONFLICT
        return Outcome.OK

    async def rename_tag(self, tag_id: int, new_name: str) -> Outcome:
        """Rename a tag.

        Renaming a tag to its own current name succeeds.

        Returns:
            ``OK``, ``NOT_FOUND`` if the tag does not exist, ``CONFLICT`` if
            another tag already uses *new_name*.
        """
        new_name = _check_tag_name(new_name)
        try:
            async with self._ds.transaction() as session:
                tag = await session.get(Tag, tag_id)
                if tag is None:
                    return Outcome.NOT_FOUND
                other = await session.execute(
                    select(Tag.id).where(Tag.name == new_name, Tag.id != tag_id)
                )
                if other.first() is not None:
                    return Outcome.CONFLICT
                tag.name = new_name
        except IntegrityError:
            return Outcome.CONFLICT
        return Outcome.OK

    async def delete_tag(self, tag_id: int) -> Outcome:
        """Delete a tag; its asset associations go with it."""
        async with self._ds.transaction() as session:
            tag = await session.get(Tag, tag_id)
            if tag is None:
                return Outcome.NOT_FOUND
            await session.delete(tag)
        return Outcome.OK

    async def list_tags(self) -> list[TagRecord]:
        async with self._ds.session() as session:
            result = await session.execute(select(Tag).order_by(Tag.id))
            return [TagRecord.from_model(t) for t in result.scalars().all()]

    async def get_tag(self, tag_id: int) -> TagRecord | None:
        async with self._ds.session() as session:
            tag = await session.get(Tag, tag_id)
            return TagRecord.from_model(tag) if tag is not None else None

    async def get_tag_by_name(self, name: str) -> TagRecord | None:
        async with self._ds.session() as session:
            result = await session.execute(select(Tag).where(Tag.name == name))
            tag = result.scalar_one_or_none()
            return TagRecord.from_model(tag) if tag is not None else None

    # ------------------------------------------------------------------
    # Types (read-only)
    # ------------------------------------------------------------------

    async def list_types(self) -> list[TypeRecord]:
        async with self._ds.session() as session:
            result = await session.execute(select(AssetType).order_by(AssetType.id))
            return [TypeRecord.from_model(t) for t in result.scalars().all()]

    async def get_type(self, type_id: int) -> TypeRecord | None:
        async with self._ds.session() as session:
            asset_type = await session.get(AssetType, type_id)
            return TypeRecord.from_model(asset_type) if asset_type is not None else None

    async def get_type_by_name(self, name: str) -> TypeRecord | None:
        async with self._ds.session() as session:
            result = await session.execute(select(AssetType).where(AssetType.name == name))
            asset_type = result.scalars().first()
            return TypeRecord.from_model(asset_type) if asset_type is not None else None
