"""Tests for metacat.ops.columns."""

from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook, load_workbook

from metacat.core.models import CatalogType
from metacat.core.xlsx import SHEET_TITLE
from metacat.ops.columns import (
    column_sync_status,
    export_columns,
    import_column_workbook,
    resolve_column_files,
    sync_column_terms,
)
from metacat.ops.requests import SyncColumnsRequest
from tests._support import domain, record, term


def _xlsx(rows: list[list[object]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestResolveColumnFiles:
    def test_defaults(self, ctx):
        assert resolve_column_files(ctx, SyncColumnsRequest()) == ("column.json", "term.json", "domain.json")

    def test_domain_follows_term_mapping(self, ctx, store):
        store.create_file(CatalogType.TERM, "t2.json")
        store.set_mapping(CatalogType.TERM, {"domain": "d2.json"}, "t2.json")

        resolved = resolve_column_files(ctx, SyncColumnsRequest(term_filename="t2"))
        assert resolved == ("column.json", "t2.json", "d2.json")

    def test_column_mapping_wins_over_term_mapping(self, ctx, store):
        store.set_mapping(CatalogType.COLUMN, {"term": "t3.json", "domain": "d3.json"})
        assert resolve_column_files(ctx, SyncColumnsRequest()) == ("column.json", "t3.json", "d3.json")


class TestSyncColumnTerms:
    def test_apply_then_idempotent(self, ctx, seed, store, standard_domains):
        seed(CatalogType.DOMAIN, standard_domains)
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")])
        seed(CatalogType.COLUMN, [record(columnEnglishName="USER_NAME", tableEnglishName="TB_USER")])

        first = sync_column_terms(ctx, SyncColumnsRequest())

        assert first.data["updated"] == 1
        assert first.data["applied"] is True
        (column,) = store.load_entries(CatalogType.COLUMN)
        assert column["dataType"] == "VARCHAR"
        assert column["columnKoreanName"] == "사용자_이름"

        second = sync_column_terms(ctx, SyncColumnsRequest())
        assert second.data["updated"] == 0
        assert second.data["applied"] is False

    def test_status_never_writes(self, ctx, seed, store):
        seed(CatalogType.DOMAIN, [domain("명", "VARCHAR", "100")])
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")])
        seed(CatalogType.COLUMN, [record(columnEnglishName="USER_NAME")])

        result = column_sync_status(ctx, SyncColumnsRequest(apply=True))

        assert result.data["mode"] == "preview"
        assert result.data["updated"] == 1
        assert "dataType" not in store.load_entries(CatalogType.COLUMN)[0]

    def test_unmatched_reported(self, ctx, seed):
        seed(CatalogType.COLUMN, [record(columnEnglishName="UNKNOWN_COL")])
        result = sync_column_terms(ctx, SyncColumnsRequest())
        assert result.data["unmatched"] == 1
        assert result.data["issues"][0]["code"] == "TERM_NOT_FOUND"


class TestWorkbook:
    def test_import_merges_rows(self, ctx, store):
        content = _xlsx(
            [
                ["스키마명", "테이블영문명", "컬럼영문명", "자료길이", "PK정보"],
                ["S", "TB_USER", "USER_ID", 20, "Y"],
                ["S", "TB_USER", "USER_NAME", 100, ""],
            ]
        )

        result = import_column_workbook(ctx, content)

        assert result.success
        assert result.data["uploaded"] == 2
        names = sorted(e["columnEnglishName"] for e in store.load_entries(CatalogType.COLUMN))
        assert names == ["USER_ID", "USER_NAME"]

    def test_import_twice_merges_by_key(self, ctx, store):
        content = _xlsx([["스키마명", "테이블영문명", "컬럼영문명", "자료길이", "PK정보"], ["S", "T", "C", 1, ""]])
        import_column_workbook(ctx, content)
        import_column_workbook(ctx, content)
        assert len(store.load_entries(CatalogType.COLUMN)) == 1

    def test_import_bad_workbook(self, ctx):
        result = import_column_workbook(ctx, _xlsx([["아무", "헤더"]]))
        assert result.status == 400
        assert "필수 헤더" in result.error.message

    def test_import_empty_content(self, ctx):
        assert import_column_workbook(ctx, b"").status == 400

    def test_export(self, ctx, seed):
        seed(CatalogType.COLUMN, [record(columnEnglishName="USER_ID"), record(columnEnglishName="USER_NAME")])

        result = export_columns(ctx)

        assert result.metadata == {"count": 2}
        ws = load_workbook(BytesIO(result.data))[SHEET_TITLE]
        assert ws.max_row == 3
