"""Tests for metacat.rules.mapping."""

from __future__ import annotations

from metacat.rules.mapping import (
    build_domain_map,
    build_vocabulary_map,
    check_term_mapping,
    is_domain_mapped,
)
from tests._support import domain, word


def test_vocabulary_map_indexes_both_names():
    vocab = build_vocabulary_map([word("사용자", "USER")])
    assert set(vocab) == {"사용자", "user"}


def test_later_entry_wins_on_collision():
    second = word("이용자", "USER")
    vocab = build_vocabulary_map([word("사용자", "USER"), second])
    assert vocab["user"] is second
    assert vocab["사용자"]["standardName"] == "사용자"


def test_check_term_mapping_collects_every_unmapped_part(standard_words):
    vocab = build_vocabulary_map(standard_words)
    result = check_term_mapping("사용자_주소_이름", "USER_ADDR_NM", "", vocab, {})

    assert result.is_mapped_term is False
    assert result.unmapped_term_parts == ["주소"]
    assert result.is_mapped_column is False
    assert result.unmapped_column_parts == ["ADDR", "NM"]


def test_parts_accepted_in_either_field(standard_words):
    vocab = build_vocabulary_map(standard_words)
    result = check_term_mapping("USER_이름", "사용자_NAME", "", vocab, {})
    assert result.is_mapped_term
    assert result.is_mapped_column


def test_domain_mapping_is_case_insensitive(standard_domains):
    domains = build_domain_map(standard_domains)
    assert is_domain_mapped("명_varchar(100)", domains)
    assert not is_domain_mapped("", domains)
    assert not is_domain_mapped("명_VARCHAR(200)", domains)


def test_empty_names_are_not_mapped():
    result = check_term_mapping("", "", "", {}, {})
    assert result.as_fields() == {
        "isMappedTerm": False,
        "isMappedColumn": False,
        "isMappedDomain": False,
        "unmappedTermParts": [],
        "unmappedColumnParts": [],
    }


def test_domain_builder_name():
    assert domain("명", "VARCHAR", "100")["standardDomainName"] == "명_VARCHAR(100)"
