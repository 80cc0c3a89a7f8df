"""Tests for CatalogStore: asset lifecycle, approval freeze, tags."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from asset_catalog.config.settings import DatabaseConfig, DatabaseEngine
from asset_catalog.engine.client import CatalogEngine
from asset_catalog.engine.models import AssetTag, Tag
from asset_catalog.errors.catalog_errors import InvalidInputError
from asset_catalog.errors.definitions import ErrInvalidTagName, ErrTypeNotFound
from asset_catalog.errors.outcomes import Outcome

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def _type_id(engine: CatalogEngine, name: str = "effect") -> int:
    asset_type = await engine.catalog_store.get_type_by_name(name)
    assert asset_type is not None
    return asset_type.id


async def _tag_id(engine: CatalogEngine, name: str) -> int:
    assert await engine.catalog_store.create_tag(name) is Outcome.OK
    tag = await engine.catalog_store.get_tag_by_name(name)
    assert tag is not None
    return tag.id


async def _create(engine: CatalogEngine, tag_ids: list[int] | None = None, **overrides):
    fields = {
        "name": "Fountain",
        "description": "water show",
        "type_id": await _type_id(engine),
        "author": "alice",
        "material": "WATER_BUCKET",
        "paste_link": "https://paste.example/abc",
        "raw_data": "{}",
        "owner_ref": "1234",
        "tag_ids": tag_ids or [],
    }
    fields.update(overrides)
    return await engine.catalog_store.create_asset(**fields)


async def _association_count(engine: CatalogEngine) -> int:
    async with engine.datastore.session() as session:
        result = await session.execute(select(func.count()).select_from(AssetTag))
        return result.scalar_one()


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class TestCreateAsset:
    async def test_creates_unapproved(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        assert asset.id > 0
        assert asset.approved is False
        assert asset.approved_by is None
        assert asset.type == "effect"
        assert asset.created_at == asset.updated_at

    async def test_unknown_tags_dropped(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        t2 = await _tag_id(engine, "fire")
        asset = await _create(engine, tag_ids=[t1, t2, 999])
        assert asset.tags == ("fire", "water")

    async def test_duplicate_tags_ignored(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        asset = await _create(engine, tag_ids=[t1, t1, t1])
        assert asset.tags == ("water",)
        assert await _association_count(engine) == 1

    async def test_unknown_type(self, engine: CatalogEngine) -> None:
        with pytest.raises(type(ErrTypeNotFound)) as exc:
            await _create(engine, type_id=999)
        assert exc.value is ErrTypeNotFound

    async def test_name_required(self, engine: CatalogEngine) -> None:
        with pytest.raises(InvalidInputError):
            await _create(engine, name="  ")

    async def test_name_too_long(self, engine: CatalogEngine) -> None:
        with pytest.raises(InvalidInputError):
            await _create(engine, name="n" * 101)

    async def test_paste_link_too_long(self, engine: CatalogEngine) -> None:
        with pytest.raises(InvalidInputError):
            await _create(engine, paste_link="p" * 151)

    async def test_invalid_input_stores_nothing(self, engine: CatalogEngine) -> None:
        with pytest.raises(InvalidInputError):
            await _create(engine, author="")
        assert await engine.query_engine.get_by_id(1) is None


class TestApprove:
    async def test_approve_once(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        assert await engine.catalog_store.approve(asset.id, "mod") is Outcome.OK
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.approved is True
        assert stored.approved_by == "mod"

    async def test_approve_twice(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        await engine.catalog_store.approve(asset.id)
        assert await engine.catalog_store.approve(asset.id) is Outcome.ALREADY_APPROVED

    async def test_approve_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.approve(42) is Outcome.NOT_FOUND


class TestFrozenFields:
    async def test_update_material_before_approval(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        assert await engine.catalog_store.update_material(asset.id, "STONE") is Outcome.OK
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.material == "STONE"

    async def test_update_material_after_approval(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        await engine.catalog_store.approve(asset.id)
        assert await engine.catalog_store.update_material(asset.id, "STONE") is Outcome.FROZEN
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.material == "WATER_BUCKET"

    async def test_update_paste_link_after_approval(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        await engine.catalog_store.approve(asset.id)
        outcome = await engine.catalog_store.update_paste_link(asset.id, "https://other")
        assert outcome is Outcome.FROZEN

    async def test_update_paste_link_before_approval(self, engine: CatalogEngine) -> None:
        asset = await _create(engine)
        outcome = await engine.catalog_store.update_paste_link(asset.id, "https://other")
        assert outcome is Outcome.OK

    async def test_update_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.update_material(42, "STONE") is Outcome.NOT_FOUND
        assert await engine.catalog_store.update_paste_link(42, "x") is Outcome.NOT_FOUND

    async def test_frozen_is_already_approved(self) -> None:
        assert Outcome.FROZEN is Outcome.ALREADY_APPROVED


class TestUpdateTags:
    async def test_replaces_full_set(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        t2 = await _tag_id(engine, "fire")
        asset = await _create(engine, tag_ids=[t1])
        assert await engine.catalog_store.update_tags(asset.id, [t2, 999]) is Outcome.OK
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.tags == ("fire",)

    async def test_allowed_after_approval(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        asset = await _create(engine)
        await engine.catalog_store.approve(asset.id)
        assert await engine.catalog_store.update_tags(asset.id, [t1]) is Outcome.OK
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.tags == ("water",)

    async def test_empty_clears(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        asset = await _create(engine, tag_ids=[t1])
        await engine.catalog_store.update_tags(asset.id, [])
        assert await _association_count(engine) == 0

    async def test_missing_asset(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.update_tags(42, [1]) is Outcome.NOT_FOUND


class TestDeleteAsset:
    async def test_delete_cascades_associations(self, engine: CatalogEngine) -> None:
        t1 = await _tag_id(engine, "water")
        asset = await _create(engine, tag_ids=[t1])
        assert await _association_count(engine) == 1
        assert await engine.catalog_store.delete_asset(asset.id) is Outcome.OK
        assert await engine.query_engine.get_by_id(asset.id) is None
        assert await _association_count(engine) == 0
        assert await engine.catalog_store.get_tag(t1) is not None

    async def test_delete_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.delete_asset(42) is Outcome.NOT_FOUND


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TestTags:
    async def test_create_and_list(self, engine: CatalogEngine) -> None:
        await _tag_id(engine, "water")
        await _tag_id(engine, "fire")
        names = [t.name for t in await engine.catalog_store.list_tags()]
        assert names == ["water", "fire"]

    async def test_create_conflict(self, engine: CatalogEngine) -> None:
        await _tag_id(engine, "water")
        assert await engine.catalog_store.create_tag("water") is Outcome.CONFLICT

    async def test_create_strips_name(self, engine: CatalogEngine) -> None:
        await engine.catalog_store.create_tag("  water  ")
        assert await engine.catalog_store.get_tag_by_name("water") is not None

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51])
    async def test_invalid_name(self, engine: CatalogEngine, name: str) -> None:
        with pytest.raises(type(ErrInvalidTagName)):
            await engine.catalog_store.create_tag(name)
        assert await engine.catalog_store.list_tags() == []

    async def test_name_at_limit(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.create_tag("x" * 50) is Outcome.OK

    async def test_rename(self, engine: CatalogEngine) -> None:
        tag_id = await _tag_id(engine, "water")
        assert await engine.catalog_store.rename_tag(tag_id, "aqua") is Outcome.OK
        tag = await engine.catalog_store.get_tag(tag_id)
        assert tag is not None
        assert tag.name == "aqua"

    async def test_rename_to_own_name(self, engine: CatalogEngine) -> None:
        tag_id = await _tag_id(engine, "water")
        assert await engine.catalog_store.rename_tag(tag_id, "water") is Outcome.OK

    async def test_rename_conflict(self, engine: CatalogEngine) -> None:
        tag_id = await _tag_id(engine, "water")
        await _tag_id(engine, "fire")
        assert await engine.catalog_store.rename_tag(tag_id, "fire") is Outcome.CONFLICT

    async def test_rename_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.rename_tag(42, "x") is Outcome.NOT_FOUND

    async def test_delete_cascades(self, engine: CatalogEngine) -> None:
        tag_id = await _tag_id(engine, "water")
        asset = await _create(engine, tag_ids=[tag_id])
        assert await engine.catalog_store.delete_tag(tag_id) is Outcome.OK
        stored = await engine.query_engine.get_by_id(asset.id)
        assert stored is not None
        assert stored.tags == ()

    async def test_delete_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.delete_tag(42) is Outcome.NOT_FOUND

    async def test_get_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.get_tag(42) is None
        assert await engine.catalog_store.get_tag_by_name("nope") is None


class TestTypes:
    async def test_seeded_types(self, engine: CatalogEngine) -> None:
        names = [t.name for t in await engine.catalog_store.list_types()]
        assert names == ["effect", "show"]

    async def test_get_type(self, engine: CatalogEngine) -> None:
        type_id = await _type_id(engine, "show")
        asset_type = await engine.catalog_store.get_type(type_id)
        assert asset_type is not None
        assert asset_type.name == "show"

    async def test_get_missing(self, engine: CatalogEngine) -> None:
        assert await engine.catalog_store.get_type(999) is None


class TestConcurrentTagWrites:
    """Racing writers on a file database, where each session has its own connection."""

    @pytest.fixture
    async def file_engine(self, app_config, tmp_path) -> AsyncIterator[CatalogEngine]:
        app_config.db = DatabaseConfig(
            engine=DatabaseEngine.SQLITE,
            dsn=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        )
        eng = CatalogEngine(app_config)
        await eng.initialize()
        yield eng
        await eng.close()

    async def _count(self, engine: CatalogEngine, name: str) -> int:
        async with engine.datastore.session() as session:
            stmt = select(func.count()).select_from(Tag).where(Tag.name == name)
            return (await session.execute(stmt)).scalar_one()

    async def test_create_race_has_one_winner(self, file_engine: CatalogEngine) -> None:
        outcomes = await asyncio.gather(
            *(file_engine.catalog_store.create_tag("dup") for _ in range(8))
        )
        assert outcomes.count(Outcome.OK) == 1
        assert outcomes.count(Outcome.CONFLICT) == 7
        assert await self._count(file_engine, "dup") == 1

    async def test_rename_race_has_one_winner(self, file_engine: CatalogEngine) -> None:
        tag_ids = [await _tag_id(file_engine, f"tag-{i}") for i in range(8)]
        outcomes = await asyncio.gather(
            *(file_engine.catalog_store.rename_tag(tag_id, "dup") for tag_id in tag_ids)
        )
        assert outcomes.count(Outcome.OK) == 1
        assert outcomes.count(Outcome.CONFLICT) == 7
        assert await self._count(file_engine, "dup") == 1
        assert len(await file_engine.catalog_store.list_tags()) == 8
