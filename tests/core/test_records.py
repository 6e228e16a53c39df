"""Tests for metacat.core.records — search, filters, sort and pagination."""

from __future__ import annotations

from metacat.core.records import SortKey, apply_filters, distinct_values, paginate, search, sort_records

ROWS = [
    {"id": "1", "standardName": "사용자", "abbreviation": "USER", "updatedAt": "2024-01-01"},
    {"id": "2", "standardName": "사용자명", "abbreviation": "USERNM", "updatedAt": "2024-01-03"},
    {"id": "3", "standardName": "이름", "abbreviation": "NAME", "updatedAt": "2024-01-02"},
    {"id": "4", "standardName": "번호", "abbreviation": None, "updatedAt": "2024-01-04"},
]
FIELDS = ("standardName", "abbreviation")


class TestSearch:
    def test_blank_query_returns_everything(self):
        assert len(search(ROWS, "  ", FIELDS)) == 4

    def test_substring_across_fields(self):
        assert [r["id"] for r in search(ROWS, "user", FIELDS)] == ["1", "2"]

    def test_exact_on_one_field(self):
        assert [r["id"] for r in search(ROWS, "사용자", FIELDS, field="standardName", exact=True)] == ["1"]

    def test_field_all_means_every_field(self):
        assert [r["id"] for r in search(ROWS, "name", FIELDS, field="all")] == ["3"]


class TestFilters:
    def test_every_filter_must_match(self):
        rows = apply_filters(ROWS, {"standardName": "사용자", "abbreviation": "nm"})
        assert [r["id"] for r in rows] == ["2"]

    def test_none_value_never_matches(self):
        assert apply_filters(ROWS, {"abbreviation": "x"}) == []

    def test_empty_filter_ignored(self):
        assert len(apply_filters(ROWS, {"abbreviation": ""})) == 4


class TestSort:
    def test_multi_key_with_none_last(self):
        rows = sort_records(ROWS, [SortKey("abbreviation", "desc")])
        assert [r["id"] for r in rows] == ["2", "1", "3", "4"]

    def test_ties_broken_by_updated_at_desc(self):
        rows = sort_records(ROWS, [SortKey("missing")])
        assert [r["id"] for r in rows] == ["4", "2", "3", "1"]


class TestPaginate:
    def test_page_block(self):
        page = paginate(ROWS, page=2, limit=3)
        assert [r["id"] for r in page.items] == ["4"]
        assert page.pagination() == {
            "currentPage": 2,
            "totalPages": 2,
            "totalCount": 4,
            "limit": 3,
            "hasNextPage": False,
            "hasPrevPage": True,
        }

    def test_page_past_end_is_empty(self):
        assert paginate(ROWS, page=9, limit=3).items == []


class TestDistinctValues:
    def test_sorted_and_trimmed(self):
        values = distinct_values(ROWS + [{"standardName": " 이름 "}], FIELDS)
        assert values["standardName"] == ["번호", "사용자", "사용자명", "이름"]
        assert values["abbreviation"] == ["NAME", "USER", "USERNM"]
