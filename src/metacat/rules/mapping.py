"""
Word-mapping engine.

Decomposes term and column names into underscore-separated parts and
checks every part against the vocabulary lookup map; checks the domain
name against the domain lookup map. Pure functions, no I/O.

The vocabulary map indexes *both* the standard name and the abbreviation
of each entry (lower-cased) into one key space, so a Korean part and an
English part are each accepted in either field.

Examples:
    >>> vocab = build_vocabulary_map([{"standardName": "사용자", "abbreviation": "USER"},
    ...                               {"standardName": "이름", "abbreviation": "NAME"}])
    >>> result = check_term_mapping("사용자_이름", "USER_NAME", "", vocab, {})
    >>> result.is_mapped_term, result.is_mapped_column, result.is_mapped_domain
    (True, True, False)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import split_parts, text

VocabularyMap = Mapping[str, Mapping[str, Any]]
DomainMap = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class TermMappingResult:
    is_mapped_term: bool
    is_mapped_column: bool
    is_mapped_domain: bool
    unmapped_term_parts: list[str] = field(default_factory=list)
    unmapped_column_parts: list[str] = field(default_factory=list)

    def as_fields(self) -> dict[str, Any]:
        """camelCase fields as stored on a term entry."""
        return {
            "isMappedTerm": self.is_mapped_term,
            "isMappedColumn": self.is_mapped_column,
            "isMappedDomain": self.is_mapped_domain,
            "unmappedTermParts": list(self.unmapped_term_parts),
            "unmappedColumnParts": list(self.unmapped_column_parts),
        }


def build_vocabulary_map(entries: Iterable[Mapping[str, Any]]) -> dict[str, Mapping[str, Any]]:
    """Index entries by lower-cased standardName and abbreviation.

    On key collisions the later entry wins.
    """
    lookup: dict[str, Mapping[str, Any]] = {}
    for entry in entries:
        for key in (text(entry.get("standardName")), text(entry.get("abbreviation"))):
            if key:
                lookup[key.lower()] = entry
    return lookup


def build_domain_map(entries: Iterable[Mapping[str, Any]]) -> dict[str, Mapping[str, Any]]:
    """Index domain entries by lower-cased standardDomainName."""
    lookup: dict[str, Mapping[str, Any]] = {}
    for entry in entries:
        key = text(entry.get("standardDomainName")).lower()
        if key:
            lookup.setdefault(key, entry)
    return lookup


def unmapped_parts(name: Any, vocabulary_map: VocabularyMap) -> tuple[list[str], list[str]]:
    """Return ``(parts, unmapped)`` for one compound name."""
    parts = split_parts(name)
    return parts, [p for p in parts if p.lower() not in vocabulary_map]


def is_domain_mapped(domain_name: Any, domain_map: DomainMap) -> bool:
    key = text(domain_name).lower()
    return bool(key) and key in domain_map


def check_term_mapping(
    term_name: Any,
    column_name: Any,
    domain_name: Any,
    vocabulary_map: VocabularyMap,
    domain_map: DomainMap,
) -> TermMappingResult:
    """Check a term's name, column name and domain against the catalogs.

    Every unmapped part is collected; evaluation never short-circuits.
    """
    term_parts, term_unmapped = unmapped_parts(term_name, vocabulary_map)
    column_parts, column_unmapped = unmapped_parts(column_name, vocabulary_map)
    return TermMappingResult(
        is_mapped_term=bool(term_parts) and not term_unmapped,
        is_mapped_column=bool(column_parts) and not column_unmapped,
        is_mapped_domain=is_domain_mapped(domain_name, domain_map),
        unmapped_term_parts=term_unmapped,
        unmapped_column_parts=column_unmapped,
    )
