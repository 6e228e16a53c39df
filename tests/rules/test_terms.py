"""Tests for metacat.rules.terms — the prioritized term rule set."""

from __future__ import annotations

import pytest

from metacat.rules.terms import (
    COLUMN_NAME_MAPPING,
    DOMAIN_NAME_MAPPING,
    TERM_COLUMN_ORDER_MISMATCH,
    TERM_NAME_DUPLICATE,
    TERM_NAME_LENGTH,
    TERM_NAME_MAPPING,
    TERM_NAME_SUFFIX,
    TERM_UNIQUENESS,
    TermCatalogs,
    is_formal_word,
    status_for_errors,
    validate_all,
    validate_term,
)
from tests._support import term


@pytest.fixture()
def catalogs(standard_words, standard_domains) -> TermCatalogs:
    return TermCatalogs(vocabulary=standard_words, domains=standard_domains)


def _types(errors):
    return [e.type for e in errors]


class TestValidateTerm:
    def test_valid_term(self, catalogs):
        assert validate_term(term("사용자_이름", "USER_NAME", "명_VARCHAR(100)"), catalogs) == []

    def test_column_order_mismatch_suggests_correction(self, catalogs):
        errors = validate_term(term("방문자_로그아웃_수", "LGOT_VSTR_CNT"), catalogs)

        assert _types(errors) == [TERM_COLUMN_ORDER_MISMATCH]
        assert errors[0].details["correctedColumnName"] == "VSTR_LGOT_CNT"
        assert errors[0].field == "columnName"

    def test_single_part_name(self, catalogs):
        errors = validate_term(term("사용자", "USER"), catalogs)
        assert _types(errors) == [TERM_NAME_LENGTH]

    def test_non_formal_suffix(self, catalogs):
        errors = validate_term(term("이름_사용자", "NAME_USER"), catalogs)
        assert _types(errors) == [TERM_NAME_SUFFIX]
        assert "형식단어" in errors[0].message

    def test_unknown_parts_reported(self, catalogs):
        errors = validate_term(term("사용자_주소", "USER_ADDR"), catalogs)
        assert _types(errors) == [TERM_NAME_MAPPING, COLUMN_NAME_MAPPING, TERM_NAME_SUFFIX]
        assert errors[0].details == {"unmappedParts": ["주소"]}
        assert errors[1].details == {"unmappedParts": ["ADDR"]}

    def test_unknown_domain(self, catalogs):
        errors = validate_term(term("사용자_이름", "USER_NAME", "명_VARCHAR(999)"), catalogs)
        assert _types(errors) == [DOMAIN_NAME_MAPPING]
        assert errors[0].priority == 8

    def test_duplicates_sorted_first(self, catalogs):
        existing = term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")
        candidate = term("사용자_이름", "user_name", "명_VARCHAR(100)")
        errors = validate_term(candidate, catalogs, peers=[existing])

        assert _types(errors) == [TERM_NAME_DUPLICATE, TERM_UNIQUENESS]
        assert status_for_errors(errors) == 409

    def test_same_id_is_not_a_duplicate(self, catalogs):
        entry = term("사용자_이름", "USER_NAME")
        assert validate_term(entry, catalogs, peers=[entry]) == []

    def test_edit_mode_skips_duplicate_rules(self, catalogs):
        existing = term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")
        candidate = term("사용자_이름", "USER_NAME", "명_VARCHAR(100)")
        assert validate_term(candidate, catalogs, peers=[existing], check_duplicates=False) == []

    def test_non_conflict_status(self, catalogs):
        errors = validate_term(term("사용자", "USER"), catalogs)
        assert status_for_errors(errors) == 400

    def test_error_dict_shape(self, catalogs):
        (error,) = validate_term(term("사용자", "USER"), catalogs)
        payload = error.to_dict()
        assert payload["type"] == payload["code"] == TERM_NAME_LENGTH
        assert payload["priority"] == 1
        assert payload["level"] == "error"
        assert "details" not in payload


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("Y", True), (" true ", True), ("N", False), (False, False), (None, False), (1, False)],
)
def test_is_formal_word(value, expected):
    assert is_formal_word({"isFormalWord": value}) is expected


def test_validate_all_counts(catalogs):
    entries = [
        term("사용자_이름", "USER_NAME", "명_VARCHAR(100)"),
        term("방문자_로그아웃_수", "LGOT_VSTR_CNT"),
        term("사용자", "USER"),
    ]
    report = validate_all(entries, catalogs)

    assert report["totalCount"] == 3
    assert report["passedCount"] == 1
    assert report["failedCount"] == 2
    failed_names = [f["entry"]["termName"] for f in report["failedEntries"]]
    assert failed_names == ["방문자_로그아웃_수", "사용자"]
    order_fix = report["failedEntries"][0]["suggestions"]
    assert order_fix["columnName"] == "VSTR_LGOT_CNT"
