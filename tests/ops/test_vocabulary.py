"""Tests for metacat.ops.vocabulary."""

from __future__ import annotations

import json

from metacat.core.models import CatalogType
from metacat.ops.requests import SyncVocabularyDomainRequest, ValidateVocabularyRequest
from metacat.ops.vocabulary import (
    find_duplicate_vocabulary,
    sync_vocabulary_domain,
    validate_all_vocabulary,
    validate_vocabulary_entry,
)
from tests._support import domain, word


def test_sync_applies_groups_and_mapping(ctx, store, standard_catalogs):
    result = sync_vocabulary_domain(ctx, SyncVocabularyDomainRequest())

    assert result.data["matched"] == 2
    assert result.data["applied"] is True
    by_name = {e["standardName"]: e for e in store.load_entries(CatalogType.VOCABULARY)}
    assert by_name["이름"]["domainGroup"] == "문자"
    assert store.get_mapping(CatalogType.VOCABULARY)["domain"] == "domain.json"


def test_sync_with_explicit_domain_file(ctx, seed, store, standard_catalogs):
    seed(CatalogType.DOMAIN, [domain("명", "VARCHAR", "50", group="텍스트")], "alt.json")

    result = sync_vocabulary_domain(ctx, SyncVocabularyDomainRequest(domain_filename="alt"))

    assert result.data["domainFilename"] == "alt.json"
    assert store.get_mapping(CatalogType.VOCABULARY)["domain"] == "alt.json"
    by_name = {e["standardName"]: e for e in store.load_entries(CatalogType.VOCABULARY)}
    assert by_name["이름"]["domainGroup"] == "텍스트"


def test_sync_preview(ctx, store, standard_catalogs):
    result = sync_vocabulary_domain(ctx, SyncVocabularyDomainRequest(apply=False))
    assert result.data["mode"] == "preview"
    assert "domainGroup" not in store.load_entries(CatalogType.VOCABULARY)[1]


def test_duplicates_grouped_per_field(ctx, seed):
    seed(
        CatalogType.VOCABULARY,
        [word("사용자", "USER", "User"), word("이용자", "user", "Member"), word("이름", "NAME", "Name")],
    )

    result = find_duplicate_vocabulary(ctx)

    assert result.data["groupCount"] == 1
    (group,) = result.data["groups"]
    assert group["field"] == "abbreviation"
    assert group["count"] == 2
    assert result.data["duplicateEntryCount"] == 2


def _forbid(data_dir, *keywords):
    path = data_dir / "vocabulary" / "forbidden-words.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    entries = [{"keyword": k, "type": "standardName"} for k in keywords]
    path.write_text(json.dumps({"entries": entries}, ensure_ascii=False), encoding="utf-8")


class TestValidateVocabularyEntry:
    def test_passes(self, ctx, standard_catalogs):
        result = validate_vocabulary_entry(ctx, ValidateVocabularyRequest(standard_name="주소", abbreviation="ADDR"))
        assert result.success
        assert result.data == {"valid": True, "mode": "create"}

    def test_blank_name_is_400(self, ctx):
        result = validate_vocabulary_entry(ctx, ValidateVocabularyRequest(standard_name=" ", abbreviation="X"))
        assert result.status == 400
        assert result.error.message == "표준단어명이 필요합니다."

    def test_forbidden_keyword_is_400(self, ctx, data_dir, standard_catalogs):
        _forbid(data_dir, "금칙")
        result = validate_vocabulary_entry(ctx, ValidateVocabularyRequest(standard_name="금칙단어", abbreviation="FW"))

        assert result.status == 400
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.details["data"]["errors"][0]["type"] == "FORBIDDEN_WORD"

    def test_abbreviation_duplicate_is_409(self, ctx, standard_catalogs):
        result = validate_vocabulary_entry(ctx, ValidateVocabularyRequest(standard_name="이용자", abbreviation="user"))
        assert result.status == 409
        assert result.error.message == "이미 존재하는 영문약어입니다."

    def test_synonym_in_another_file_is_409(self, ctx, seed, standard_catalogs):
        seed(CatalogType.VOCABULARY, [word("고객", "CUST", synonyms=["손님"])], "archive.json")
        result = validate_vocabulary_entry(ctx, ValidateVocabularyRequest(standard_name="손님", abbreviation="GST"))

        assert result.status == 409
        data = result.error.details["data"]
        assert data["errorCount"] == 1
        assert data["errors"][0]["type"] == "SYNONYM_CONFLICT"

    def test_abbreviation_checked_in_target_file_only(self, ctx, seed, standard_catalogs):
        seed(CatalogType.VOCABULARY, [], "empty.json")
        request = ValidateVocabularyRequest(standard_name="이용자", abbreviation="USER", filename="empty.json")
        assert validate_vocabulary_entry(ctx, request).success

    def test_edit_excludes_the_word_itself(self, ctx, standard_catalogs):
        words, _ = standard_catalogs
        request = ValidateVocabularyRequest(standard_name="사용자", abbreviation="USER", entry_id=words[0]["id"])
        result = validate_vocabulary_entry(ctx, request)
        assert result.data["mode"] == "edit"


class TestValidateAllVocabulary:
    def test_report(self, ctx, seed, data_dir):
        _forbid(data_dir, "금칙")
        seed(CatalogType.VOCABULARY, [word("사용자", "USER"), word("이용자", "USER"), word("금칙어", "FW"), word("이름", "NAME")])

        result = validate_all_vocabulary(ctx)

        assert result.message == "Vocabulary validation completed"
        assert (result.data["totalCount"], result.data["failedCount"]) == (4, 3)

    def test_without_forbidden_list(self, ctx, standard_catalogs):
        assert validate_all_vocabulary(ctx).data["failedCount"] == 0
