"""Tests for QueryEngine: search, latest, tag filters, visibility."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from asset_catalog.engine.client import CatalogEngine
from asset_catalog.engine.records import AssetRecord
from asset_catalog.engine.services.query_engine import QueryEngine
from asset_catalog.errors.definitions import ErrInvalidLimit
from asset_catalog.errors.outcomes import Outcome
from asset_catalog.metrics.collector import CatalogMetrics


async def _tag(engine: CatalogEngine, name: str) -> int:
    assert await engine.catalog_store.create_tag(name) is Outcome.OK
    tag = await engine.catalog_store.get_tag_by_name(name)
    assert tag is not None
    return tag.id


async def _asset(
    engine: CatalogEngine,
    name: str,
    *,
    tags: list[int] | None = None,
    approved: bool = True,
    raw_data: str = "{}",
) -> AssetRecord:
    asset_type = await engine.catalog_store.get_type_by_name("effect")
    assert asset_type is not None
    asset = await engine.catalog_store.create_asset(
        name=name,
        description="",
        type_id=asset_type.id,
        author="alice",
        material="STONE",
        paste_link="https://paste.example/x",
        raw_data=raw_data,
        owner_ref="1234",
        tag_ids=tags or [],
    )
    if approved:
        await engine.catalog_store.approve(asset.id)
    return asset


def _names(records: list[AssetRecord]) -> list[str]:
    return [r.name for r in records]


class TestDirectLookups:
    async def test_get_all_excludes_unapproved(self, engine: CatalogEngine) -> None:
        await _asset(engine, "Fountain")
        await _asset(engine, "Pending", approved=False)
        assert _names(await engine.query_engine.get_all()) == ["Fountain"]

    async def test_get_by_id_ignores_approval(self, engine: CatalogEngine) -> None:
        pending = await _asset(engine, "Pending", approved=False)
        found = await engine.query_engine.get_by_id(pending.id)
        assert found is not None
        assert found.approved is False

    async def test_get_by_id_missing(self, engine: CatalogEngine) -> None:
        assert await engine.query_engine.get_by_id(404) is None

    async def test_get_raw(self, engine: CatalogEngine) -> None:
        asset = await _asset(engine, "Fountain", raw_data='{"frames": 3}', approved=False)
        assert await engine.query_engine.get_raw(asset.id) == '{"frames": 3}'

    async def test_get_raw_missing(self, engine: CatalogEngine) -> None:
        assert await engine.query_engine.get_raw(404) is None

    async def test_tags_attached(self, engine: CatalogEngine) -> None:
        water = await _tag(engine, "water")
        fire = await _tag(engine, "fire")
        asset = await _asset(engine, "Steam", tags=[water, fire])
        found = await engine.query_engine.get_by_id(asset.id)
        assert found is not None
        assert found.tags == ("fire", "water")


class TestSearchByName:
    async def test_case_insensitive_substring(self, engine: CatalogEngine) -> None:
        await _asset(engine, "Big Fountain")
        await _asset(engine, "Fireworks")
        assert _names(await engine.query_engine.search_by_name("FOUNT")) == ["Big Fountain"]

    async def test_case_insensitive_non_ascii(self, engine: CatalogEngine) -> None:
        await _asset(engine, "Élan Effect")
        assert _names(await engine.query_engine.search_by_name("élan")) == ["Élan Effect"]
        assert _names(await engine.query_engine.search_by_name("ÉLAN")) == ["Élan Effect"]

    async def test_excludes_unapproved(self, engine: CatalogEngine) -> None:
        await _asset(engine, "Fountain", approved=False)
        assert await engine.query_engine.search_by_name("fountain") == []

    async def test_limit(self, engine: CatalogEngine) -> None:
        for i in range(3):
            await _asset(engine, f"Fountain {i}")
        assert len(await engine.query_engine.search_by_name("fountain", 2)) == 2

    async def test_wildcards_are_literal(self, engine: CatalogEngine) -> None:
        await _asset(engine, "100% water")
        await _asset(engine, "100 water")
        assert _names(await engine.query_engine.search_by_name("100%")) == ["100% water"]

    async def test_newest_first(self, engine: CatalogEngine) -> None:
        await _asset(engine, "Fountain A")
        await _asset(engine, "Fountain B")
        assert _names(await engine.query_engine.search_by_name("fountain")) == [
            "Fountain B",
            "Fountain A",
        ]


class TestGetLatest:
    async def test_newest_first_with_limit(self, engine: CatalogEngine) -> None:
        for name in ("A", "B", "C"):
            await _asset(engine, name)
        assert _names(await engine.query_engine.get_latest(2)) == ["C", "B"]

    async def test_default_limit(self, engine: CatalogEngine) -> None:
        for i in range(12):
            await _asset(engine, f"Asset {i}")
        assert len(await engine.query_engine.get_latest()) == 10

    async def test_excludes_unapproved(self, engine: CatalogEngine) -> None:
        await _asset(engine, "A")
        await _asset(engine, "B", approved=False)
        assert _names(await engine.query_engine.get_latest(5)) == ["A"]


class TestFilterByTags:
    @pytest.fixture
    async def tagged(self, engine: CatalogEngine) -> dict[str, int]:
        water = await _tag(engine, "water")
        fire = await _tag(engine, "fire")
        await _asset(engine, "Fountain", tags=[water])
        await _asset(engine, "Steam", tags=[water, fire])
        await _asset(engine, "Torch", tags=[fire])
        await _asset(engine, "Hidden", tags=[water, fire], approved=False)
        return {"water": water, "fire": fire}

    async def test_any(self, engine: CatalogEngine, tagged: dict[str, int]) -> None:
        results = await engine.query_engine.filter_by_tags([tagged["water"], tagged["fire"]])
        assert _names(results) == ["Torch", "Steam", "Fountain"]

    async def test_all(self, engine: CatalogEngine, tagged: dict[str, int]) -> None:
        results = await engine.query_engine.filter_by_tags(
            [tagged["water"], tagged["fire"]], require_all=True
        )
        assert _names(results) == ["Steam"]

    async def test_all_with_duplicate_ids(
        self, engine: CatalogEngine, tagged: dict[str, int]
    ) -> None:
        ids = [tagged["water"], tagged["water"], tagged["fire"]]
        results = await engine.query_engine.filter_by_tags(ids, require_all=True)
        assert _names(results) == ["Steam"]

    async def test_all_with_unknown_tag_matches_nothing(
        self, engine: CatalogEngine, tagged: dict[str, int]
    ) -> None:
        results = await engine.query_engine.filter_by_tags(
            [tagged["water"], 999], require_all=True
        )
        assert results == []

    async def test_limit(self, engine: CatalogEngine, tagged: dict[str, int]) -> None:
        results = await engine.query_engine.filter_by_tags([tagged["water"]], limit=1)
        assert _names(results) == ["Steam"]

    async def test_results_carry_all_tags(
        self, engine: CatalogEngine, tagged: dict[str, int]
    ) -> None:
        results = await engine.query_engine.filter_by_tags([tagged["fire"]])
        steam = next(r for r in results if r.name == "Steam")
        assert steam.tags == ("fire", "water")

    @pytest.mark.parametrize("ids", [[], [0, -3]])
    async def test_empty_input_skips_storage(self, ids: list[int]) -> None:
        datastore = MagicMock()
        qe = QueryEngine(datastore)
        assert await qe.filter_by_tags(ids) == []
        assert await qe.filter_by_tags(ids, require_all=True) == []
        datastore.session.assert_not_called()


class TestLimits:
    @pytest.mark.parametrize("limit", [0, -1])
    async def test_non_positive_limit(self, engine: CatalogEngine, limit: int) -> None:
        with pytest.raises(type(ErrInvalidLimit)):
            await engine.query_engine.get_latest(limit)
        with pytest.raises(type(ErrInvalidLimit)):
            await engine.query_engine.search_by_name("x", limit)
        with pytest.raises(type(ErrInvalidLimit)):
            await engine.query_engine.filter_by_tags([1], limit)


class TestQueryMetrics:
    async def test_durations_recorded(self, engine: CatalogEngine) -> None:
        metrics = CatalogMetrics()
        qe = QueryEngine(engine.datastore, metrics=metrics)
        await qe.get_latest(1)
        count = metrics.registry.get_sample_value(
            "catalog_query_duration_seconds_count", {"operation": "get_latest"}
        )
        assert count == 1.0
