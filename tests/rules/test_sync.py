"""Tests for metacat.rules.sync planners."""

from __future__ import annotations

from metacat.rules.sync import plan_column_sync, plan_term_sync, plan_vocabulary_domain_sync
from tests._support import record, term

NOW = "2025-01-01T00:00:00.000Z"


class TestColumnSync:
    def test_fields_derived_from_term_and_domain(self, standard_domains):
        columns = [record(columnEnglishName="user_name", tableEnglishName="TB_USER")]
        terms = [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")]

        plan = plan_column_sync(columns, terms, standard_domains, now=NOW)

        (column,) = plan.entries
        assert column["columnKoreanName"] == "사용자_이름"
        assert column["domainName"] == "명_VARCHAR(100)"
        assert column["dataType"] == "VARCHAR"
        assert column["dataLength"] == "100"
        assert "dataDecimalLength" not in column
        assert column["updatedAt"] == NOW
        assert plan.summary()["updated"] == 1
        assert plan.matched == plan.matched_domain == 1

    def test_second_run_changes_nothing(self, standard_domains):
        columns = [record(columnEnglishName="USER_NAME")]
        terms = [term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")]

        first = plan_column_sync(columns, terms, standard_domains, now=NOW)
        second = plan_column_sync(first.entries, terms, standard_domains, now="later")

        assert second.updated == 0
        assert second.changes == []
        assert second.entries == first.entries

    def test_unmatched_columns_reported(self, standard_domains):
        columns = [record(columnEnglishName="NOPE"), record(columnEnglishName="")]
        plan = plan_column_sync(columns, [], standard_domains, now=NOW)

        assert plan.unmatched == 2
        assert [i["code"] for i in plan.issues] == ["TERM_NOT_FOUND", "COLUMN_NAME_EMPTY"]
        assert plan.unmatched_columns[1]["columnEnglishName"] == "(빈값)"

    def test_missing_domain_is_a_warning(self):
        columns = [record(columnEnglishName="USER_NAME")]
        plan = plan_column_sync(columns, [term("사용자_이름", "USER_NAME", "없음")], [], now=NOW)

        assert plan.unmatched_domain == 1
        assert plan.issues[0]["level"] == "warning"
        assert plan.entries[0]["domainName"] == "없음"

    def test_input_not_mutated(self, standard_domains):
        column = record(columnEnglishName="USER_NAME")
        plan_column_sync([column], [term("사용자_이름", "USER_NAME")], standard_domains, now=NOW)
        assert "columnKoreanName" not in column


class TestTermSync:
    def test_flags_recomputed(self, standard_words, standard_domains):
        terms = [
            term("사용자_이름", "USER_NAME", "명_VARCHAR(100)"),
            term("사용자_주소", "USER_ADDR"),
        ]
        plan = plan_term_sync(terms, standard_words, standard_domains, now=NOW)

        first, second = plan.entries
        assert first["isMappedTerm"] and first["isMappedColumn"] and first["isMappedDomain"]
        assert second["unmappedTermParts"] == ["주소"]
        assert plan.summary() == {
            "updated": 2,
            "matchedTerm": 1,
            "matchedColumn": 1,
            "matchedDomain": 1,
            "total": 2,
        }

        again = plan_term_sync(plan.entries, standard_words, standard_domains, now="later")
        assert again.updated == 0


class TestVocabularyDomainSync:
    def test_groups_assigned(self, standard_words, standard_domains):
        plan = plan_vocabulary_domain_sync(standard_words, standard_domains, now=NOW)

        by_name = {e["standardName"]: e for e in plan.entries}
        assert by_name["이름"]["domainGroup"] == "문자"
        assert by_name["이름"]["isDomainCategoryMapped"] is True
        assert by_name["수"]["domainGroup"] == "숫자"
        assert by_name["사용자"]["isDomainCategoryMapped"] is False
        assert plan.matched == 2
        assert plan.unmatched == 3
        assert plan.updated == 5

        again = plan_vocabulary_domain_sync(plan.entries, standard_domains, now="later")
        assert again.updated == 0
