"""Tests for metacat.ops.relations."""

from __future__ import annotations

from metacat.core.models import CatalogType
from metacat.ops.relations import resolve_design_files, sync_relations, validate_design_relations
from metacat.ops.requests import RelationFilesRequest, SyncRelationsRequest
from tests._support import record


def _seed_design(seed):
    seed(CatalogType.ENTITY, [record(schemaName="S", entityName="사용자", tableKoreanName="사용자정보")])
    seed(
        CatalogType.TABLE,
        [record(id="t1", schemaName="S", tableEnglishName="TB_USER", tableKoreanName="사용자정보", relatedEntityName="사용자정보")],
    )
    seed(CatalogType.COLUMN, [record(id="c1", schemaName="S", tableEnglishName="사용자정보", columnEnglishName="USER_ID")])


def test_resolve_first_listed_file(ctx, store):
    store.create_file(CatalogType.ENTITY, "b.json")
    store.create_file(CatalogType.ENTITY, "a.json")

    resolved = resolve_design_files(ctx, RelationFilesRequest(table_file="tables"))

    assert resolved["entity"] == "a.json"
    assert resolved["table"] == "tables.json"
    assert resolved["database"] is None


def test_validate(ctx, seed):
    _seed_design(seed)
    result = validate_design_relations(ctx, RelationFilesRequest())

    assert result.data["files"]["table"] == "table.json"
    totals = result.data["validation"]["totals"]
    assert totals["errorCount"] == 1


def test_preview_does_not_write(ctx, seed, store):
    _seed_design(seed)

    result = sync_relations(ctx, SyncRelationsRequest())

    assert result.data["mode"] == "preview"
    assert result.data["counts"]["totalCandidates"] == 2
    assert result.data["counts"]["appliedTotalUpdates"] == 0
    assert store.load_entries(CatalogType.TABLE)[0]["relatedEntityName"] == "사용자정보"


def test_apply_fixes_and_revalidates(ctx, seed, store):
    _seed_design(seed)

    result = sync_relations(ctx, SyncRelationsRequest(apply=True))

    counts = result.data["counts"]
    assert counts["appliedTableUpdates"] == 1
    assert counts["appliedColumnUpdates"] == 1
    assert counts["appliedTotalUpdates"] == 2
    assert result.data["validationBefore"]["totals"]["errorCount"] == 1
    assert result.data["validationAfter"]["totals"]["errorCount"] == 0
    assert store.load_entries(CatalogType.TABLE)[0]["relatedEntityName"] == "사용자"
    assert store.load_entries(CatalogType.COLUMN)[0]["tableEnglishName"] == "TB_USER"


def test_empty_design_catalogs(ctx):
    result = sync_relations(ctx, SyncRelationsRequest(apply=True))
    assert result.success
    assert result.data["counts"]["totalCandidates"] == 0
