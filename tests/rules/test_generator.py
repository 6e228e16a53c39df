"""Tests for metacat.rules.generator."""

from __future__ import annotations

import pytest

from metacat.rules.generator import (
    EN_TO_KO,
    KO_TO_EN,
    UNKNOWN_PART,
    convert_term,
    last_segment,
    recommend_domains,
    segment_term,
    segment_word,
    segment_words,
    word_lookup,
)
from tests._support import domain, word


@pytest.fixture()
def vocabulary():
    return [
        word("사용자", "USER"),
        word("사용", "USE"),
        word("자", "JA"),
        word("이름", "NAME", domainCategory="명"),
    ]


class TestConvert:
    def test_ko_to_en(self, vocabulary):
        assert convert_term("사용자_이름", word_lookup(vocabulary, KO_TO_EN)) == "USER_NAME"

    def test_en_to_ko_ignores_case(self, vocabulary):
        assert convert_term("user_Name", word_lookup(vocabulary, EN_TO_KO)) == "사용자_이름"

    def test_unknown_parts_marked(self, vocabulary):
        assert convert_term("사용자_주소", word_lookup(vocabulary, KO_TO_EN)) == f"USER_{UNKNOWN_PART}"


class TestSegment:
    def test_every_split_is_returned(self, vocabulary):
        words = segment_words(vocabulary, KO_TO_EN)
        assert sorted(segment_word("사용자이름", words)) == ["사용_자_이름", "사용자_이름"]

    def test_unmatched_word(self, vocabulary):
        assert segment_word("주소", segment_words(vocabulary, KO_TO_EN)) == [UNKNOWN_PART]

    def test_original_case_restored(self, vocabulary):
        assert segment_word("UserName", segment_words(vocabulary, EN_TO_KO)) == ["User_Name"]

    def test_spaces_multiply_combinations(self, vocabulary):
        words = segment_words(vocabulary, KO_TO_EN)
        assert sorted(segment_term("사용자  이름", words)) == ["사용_자_이름", "사용자_이름"]
        assert segment_term("이름 주소", words) == [f"이름_{UNKNOWN_PART}"]

    def test_blank_term(self, vocabulary):
        assert segment_term("   ", segment_words(vocabulary, KO_TO_EN)) == []


class TestRecommend:
    def test_last_segment(self):
        assert last_segment(" 사용자_이름_ ") == "이름"
        assert last_segment("") == ""

    def test_recommends_domains_of_mapped_category(self, vocabulary):
        domains = [domain("명", "VARCHAR", "100"), domain("명", "VARCHAR", "200"), domain("수량", "NUMBER", "10")]

        result = recommend_domains("사용자_이름", vocabulary, domains)

        assert result == {
            "lastSegment": "이름",
            "matchedStandardNames": ["이름"],
            "matchedDomainCategories": ["명"],
            "recommendations": ["명_VARCHAR(100)", "명_VARCHAR(200)"],
        }

    def test_unmapped_category_is_skipped(self):
        vocabulary = [word("이름", "NAME", domainCategory="명", isDomainCategoryMapped=False)]
        result = recommend_domains("사용자_이름", vocabulary, [domain("명", "VARCHAR", "100")])
        assert result["matchedStandardNames"] == ["이름"]
        assert result["recommendations"] == []

    def test_unknown_suffix(self, vocabulary):
        result = recommend_domains("사용자_주소", vocabulary, [])
        assert result["lastSegment"] == "주소"
        assert result["matchedStandardNames"] == []
