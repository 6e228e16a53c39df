"""Tests for metacat.ops.terms."""

from __future__ import annotations

from metacat.core.models import CatalogType
from metacat.ops.context import OperationContext
from metacat.ops.requests import RecommendDomainRequest, SyncTermsRequest, ValidateTermRequest
from metacat.ops.terms import recommend_term_domains, sync_terms, validate_all_terms, validate_term_entry
from tests._support import domain, term, word


class TestValidateTermEntry:
    def test_passes(self, ctx, standard_catalogs):
        result = validate_term_entry(
            ctx, ValidateTermRequest(term_name="사용자_이름", column_name="USER_NAME", domain_name="명_VARCHAR(100)")
        )
        assert result.success
        assert result.data == {"valid": True, "mode": "create"}

    def test_order_mismatch_is_400_with_suggestion(self, ctx, standard_catalogs):
        result = validate_term_entry(
            ctx, ValidateTermRequest(term_name="방문자_로그아웃_수", column_name="LGOT_VSTR_CNT")
        )

        assert result.status == 400
        data = result.error.details["data"]
        assert data["errors"][0]["type"] == "TERM_COLUMN_ORDER_MISMATCH"
        assert data["suggestions"]["columnName"] == "VSTR_LGOT_CNT"
        assert result.error.message == data["errors"][0]["message"]

    def test_duplicate_in_any_term_file_is_409(self, ctx, seed, standard_catalogs):
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME")], "archive.json")
        result = validate_term_entry(ctx, ValidateTermRequest(term_name="사용자_이름", column_name="USER_NAME"))
        assert result.status == 409
        assert result.error.code == "CONFLICT"

    def test_edit_mode_skips_duplicates(self, ctx, seed, standard_catalogs):
        existing = term("사용자_이름", "USER_NAME")
        seed(CatalogType.TERM, [existing, term("사용자_이름", "USER_NAME")])
        result = validate_term_entry(
            ctx, ValidateTermRequest(term_name="사용자_이름", column_name="USER_NAME", entry_id=existing["id"])
        )
        assert result.data["mode"] == "edit"

    def test_required_inputs(self, ctx):
        assert validate_term_entry(ctx, ValidateTermRequest(term_name=" ", column_name="A")).status == 400
        assert validate_term_entry(ctx, ValidateTermRequest(term_name="가_나", column_name="")).status == 400

    def test_uses_mapped_vocabulary_file(self, ctx, seed, store, standard_domains):
        seed(CatalogType.VOCABULARY, [word("고객", "CUST"), word("번호", "NO", isFormalWord=True)], "alt.json")
        store.set_mapping(CatalogType.TERM, {"vocabulary": "alt.json"})

        result = validate_term_entry(ctx, ValidateTermRequest(term_name="고객_번호", column_name="CUST_NO"))
        assert result.success


class TestValidateAllTerms:
    def test_report(self, ctx, seed, standard_catalogs):
        seed(
            CatalogType.TERM,
            [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)"), term("사용자", "USER")],
        )
        result = validate_all_terms(ctx)

        assert result.data["totalCount"] == 2
        assert result.data["failedCount"] == 1
        (failed,) = result.data["failedEntries"]
        assert failed["suggestions"]["actionType"] == "DELETE_TERM"


class TestSyncTerms:
    def test_apply_writes_flags(self, ctx, seed, store, standard_catalogs):
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")])

        result = sync_terms(ctx, SyncTermsRequest())

        assert result.data["updated"] == 1
        assert result.data["applied"] is True
        (stored,) = store.load_entries(CatalogType.TERM)
        assert stored["isMappedDomain"] is True
        assert sync_terms(ctx, SyncTermsRequest()).data["updated"] == 0

    def test_preview_leaves_file(self, ctx, seed, store, standard_catalogs):
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME")])
        result = sync_terms(ctx, SyncTermsRequest(apply=False))
        assert result.data["mode"] == "preview"
        assert result.data["applied"] is False
        assert "isMappedTerm" not in store.load_entries(CatalogType.TERM)[0]

    def test_dry_run_context_never_applies(self, store, seed, standard_catalogs):
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME")])
        result = sync_terms(OperationContext(store=store, dry_run=True), SyncTermsRequest())
        assert result.data["applied"] is False

    def test_mapped_domain_file(self, ctx, seed, store, standard_catalogs):
        seed(CatalogType.DOMAIN, [domain("코드", "CHAR", "1")], "codes.json")
        seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME", "코드_CHAR(1)")])
        store.set_mapping(CatalogType.TERM, {"domain": "codes.json"})

        result = sync_terms(ctx, SyncTermsRequest())
        assert result.data["domainFilename"] == "codes.json"
        assert result.data["matchedDomain"] == 1


class TestRecommendTermDomains:
    def test_recommends_by_last_word(self, ctx, standard_catalogs):
        result = recommend_term_domains(ctx, RecommendDomainRequest(term_name="사용자_이름"))

        assert result.data["lastSegment"] == "이름"
        assert result.data["matchedDomainCategories"] == ["명"]
        assert result.data["recommendations"] == ["명_VARCHAR(100)"]

    def test_blank_term_is_empty(self, ctx):
        result = recommend_term_domains(ctx, RecommendDomainRequest(term_name=" "))
        assert result.success
        assert result.data["recommendations"] == []

    def test_uses_mapped_catalogs(self, ctx, seed, store, standard_catalogs):
        seed(CatalogType.DOMAIN, [domain("명", "VARCHAR", "50")], "alt-domain.json")
        store.set_mapping(CatalogType.TERM, {"domain": "alt-domain.json"})

        result = recommend_term_domains(ctx, RecommendDomainRequest(term_name="고객_이름"))

        assert result.data["recommendations"] == ["명_VARCHAR(50)"]
