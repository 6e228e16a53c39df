"""Tests for metacat.ops.domains."""

from __future__ import annotations

from metacat.core.models import CatalogType
from metacat.ops.domains import validate_all_domains, validate_domain_entry
from metacat.ops.requests import ValidateDomainRequest
from tests._support import domain


class TestValidateDomainEntry:
    def test_passes_with_generated_name(self, ctx, standard_catalogs):
        request = ValidateDomainRequest(domain_category="금액", physical_data_type="NUMBER", data_length="15", decimal_places="2")
        result = validate_domain_entry(ctx, request)
        assert result.data == {"valid": True, "generatedDomainName": "금액_NUMBER(15).2"}

    def test_duplicate_in_another_file_is_409(self, ctx, seed, standard_catalogs):
        seed(CatalogType.DOMAIN, [domain("금액", "NUMBER", "15")], "archive.json")
        result = validate_domain_entry(
            ctx, ValidateDomainRequest(domain_category="금액", physical_data_type="NUMBER", data_length="15")
        )

        assert result.status == 409
        assert result.error.message == "이미 존재하는 도메인명입니다: 금액_NUMBER(15)"
        assert result.error.details["data"]["generatedDomainName"] == "금액_NUMBER(15)"

    def test_missing_type_is_400(self, ctx, standard_catalogs):
        result = validate_domain_entry(ctx, ValidateDomainRequest(domain_category="명", physical_data_type=""))
        assert result.status == 400
        assert result.error.details["data"]["errors"][0]["field"] == "physicalDataType"

    def test_edit_excludes_itself(self, ctx, standard_catalogs):
        _, domains = standard_catalogs
        request = ValidateDomainRequest(
            domain_category="명", physical_data_type="VARCHAR", data_length="100", entry_id=domains[0]["id"]
        )
        assert validate_domain_entry(ctx, request).success


def test_validate_all_reports_mismatch(ctx, seed):
    seed(CatalogType.DOMAIN, [domain("명", "VARCHAR", "100"), {**domain("수량", "NUMBER", "10"), "dataLength": "12"}])

    result = validate_all_domains(ctx)

    assert result.data["failedCount"] == 1
    (failed,) = result.data["failedEntries"]
    assert failed["generatedDomainName"] == "수량_NUMBER(12)"
    assert failed["errors"][0]["type"] == "DOMAIN_NAME_MISMATCH"
