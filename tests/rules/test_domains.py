"""Tests for metacat.rules.domains."""

from __future__ import annotations

from metacat.rules.domains import (
    DOMAIN_NAME_DUPLICATE,
    DOMAIN_NAME_MISMATCH,
    check_domain_draft,
    expected_domain_name,
    validate_domains,
)
from tests._support import domain


def test_expected_name_includes_length_and_decimals():
    assert expected_domain_name({"domainCategory": "금액", "physicalDataType": "NUMBER", "dataLength": "15", "decimalPlaces": "2"}) == "금액_NUMBER(15).2"


class TestValidateDomains:
    def test_clean_file(self, standard_domains):
        result = validate_domains(standard_domains)
        assert result["failedCount"] == 0
        assert result["passedCount"] == 2

    def test_mismatch_reports_expected_name(self):
        stale = {**domain("명", "VARCHAR", "100"), "standardDomainName": "명_VARCHAR(50)"}

        (failed,) = validate_domains([stale])["failedEntries"]

        assert failed["generatedDomainName"] == "명_VARCHAR(100)"
        (error,) = failed["errors"]
        assert error["type"] == DOMAIN_NAME_MISMATCH
        assert error["message"] == "표준도메인명과 계산값이 다릅니다. 기대값: 명_VARCHAR(100)"

    def test_duplicates_flag_every_member(self):
        result = validate_domains([domain("명", "VARCHAR", "100"), domain("명", "VARCHAR", "100")])
        assert result["failedCount"] == 2
        assert all(f["errors"][0]["type"] == DOMAIN_NAME_DUPLICATE for f in result["failedEntries"])

    def test_required_fields_sorted_first(self):
        broken = {**domain("", "VARCHAR", "10"), "standardDomainName": "x"}
        (failed,) = validate_domains([broken])["failedEntries"]
        assert [e["type"] for e in failed["errors"]] == ["REQUIRED_FIELD", DOMAIN_NAME_MISMATCH]
        assert failed["errors"][0]["message"] == "도메인 분류명이 필요합니다."


class TestCheckDomainDraft:
    def test_unique(self, standard_domains):
        name, issues = check_domain_draft({"domainCategory": "명", "physicalDataType": "VARCHAR", "dataLength": "200"}, standard_domains)
        assert name == "명_VARCHAR(200)"
        assert issues == []

    def test_duplicate_across_files(self, standard_domains):
        name, issues = check_domain_draft(
            {"domainCategory": "명", "physicalDataType": "varchar", "dataLength": 100}, standard_domains
        )
        assert name == "명_varchar(100)"
        assert [i.type for i in issues] == [DOMAIN_NAME_DUPLICATE]

    def test_edit_skips_itself(self, standard_domains):
        own = standard_domains[0]
        draft = {"id": own["id"], "domainCategory": "명", "physicalDataType": "VARCHAR", "dataLength": "100"}
        assert check_domain_draft(draft, standard_domains)[1] == []

    def test_missing_type_stops_before_duplicate_check(self, standard_domains):
        _, issues = check_domain_draft({"domainCategory": "명", "physicalDataType": ""}, standard_domains)
        assert [i.message for i in issues] == ["물리 데이터타입이 필요합니다."]
