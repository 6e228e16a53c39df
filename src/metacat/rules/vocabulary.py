"""
Vocabulary validator.

Rules, highest priority first::

    1 REQUIRED_FIELD          standardName or abbreviation is blank
    2 FORBIDDEN_WORD          a forbidden keyword occurs in the word
    3 SYNONYM_CONFLICT        standardName is another word's synonym
    4 ABBREVIATION_DUPLICATE  another word in the file has the same abbreviation

Forbidden keywords come from two places: the global list
(``vocabulary/forbidden-words.json``, entries ``{keyword, type}`` where
``type`` names the field the keyword is searched in as a substring) and
the ``forbiddenWords`` of the other words, which forbid an exact
standardName. Name comparisons for synonyms, forbidden words and
abbreviations ignore case and surrounding blanks.

Example:
    >>> words = [{"id": "1", "standardName": "사용자", "abbreviation": "USER", "synonyms": ["고객"]}]
    >>> index = WordIndex.build(words)
    >>> [i.type for i in validate_word({"standardName": "고객", "abbreviation": "USER"}, index)]
    ['SYNONYM_CONFLICT', 'ABBREVIATION_DUPLICATE']
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import text
from metacat.rules.issues import REQUIRED_FIELD, CatalogIssue, collect_failures, others

FORBIDDEN_WORD = "FORBIDDEN_WORD"
SYNONYM_CONFLICT = "SYNONYM_CONFLICT"
ABBREVIATION_DUPLICATE = "ABBREVIATION_DUPLICATE"

VOCABULARY_ERROR_PRIORITY: dict[str, int] = {
    REQUIRED_FIELD: 1,
    FORBIDDEN_WORD: 2,
    SYNONYM_CONFLICT: 3,
    ABBREVIATION_DUPLICATE: 4,
}

CONFLICT_TYPES = frozenset({SYNONYM_CONFLICT, ABBREVIATION_DUPLICATE})

Owners = dict[str, list[Mapping[str, Any]]]


def _issue(kind: str, message: str, field_name: str) -> CatalogIssue:
    return CatalogIssue(kind, message, field_name, VOCABULARY_ERROR_PRIORITY[kind])


def _key(value: Any) -> str:
    return text(value).lower()


def _owners_by(entries: Iterable[Mapping[str, Any]], list_field: str) -> Owners:
    owners: Owners = defaultdict(list)
    for entry in entries:
        for value in entry.get(list_field) or []:
            if isinstance(value, str) and value.strip():
                owners[_key(value)].append(entry)
    return owners


@dataclass(slots=True)
class WordIndex:
    """Lookups a word is checked against.

    ``abbreviations`` comes from the word's own file; synonym and
    forbidden-word owners may span every vocabulary file.
    """

    abbreviations: Owners = field(default_factory=dict)
    synonym_owners: Owners = field(default_factory=dict)
    forbidden_owners: Owners = field(default_factory=dict)
    forbidden_words: list[Mapping[str, Any]] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        file_entries: Iterable[Mapping[str, Any]],
        *,
        all_entries: Iterable[Mapping[str, Any]] | None = None,
        forbidden_words: Iterable[Mapping[str, Any]] = (),
    ) -> WordIndex:
        file_entries = list(file_entries)
        scope = file_entries if all_entries is None else list(all_entries)
        abbreviations: Owners = defaultdict(list)
        for entry in file_entries:
            key = _key(entry.get("abbreviation"))
            if key:
                abbreviations[key].append(entry)
        return cls(
            abbreviations=abbreviations,
            synonym_owners=_owners_by(scope, "synonyms"),
            forbidden_owners=_owners_by(scope, "forbiddenWords"),
            forbidden_words=[fw for fw in forbidden_words if text(fw.get("keyword"))],
        )


def find_forbidden_keyword(
    standard_name: str,
    abbreviation: str,
    forbidden_words: Iterable[Mapping[str, Any]],
) -> Mapping[str, Any] | None:
    """First global keyword contained in the field its ``type`` names."""
    for fw in forbidden_words:
        keyword = text(fw.get("keyword"))
        if not keyword:
            continue
        kind = fw.get("type")
        if kind == "standardName" and keyword in standard_name:
            return fw
        if kind == "abbreviation" and keyword in abbreviation:
            return fw
    return None


def validate_word(
    entry: Mapping[str, Any],
    index: WordIndex,
    *,
    require_abbreviation: bool = True,
) -> list[CatalogIssue]:
    """Issues of one word, in rule order; the word itself is never its own peer."""
    standard_name = text(entry.get("standardName"))
    abbreviation = text(entry.get("abbreviation"))
    issues: list[CatalogIssue] = []

    if not standard_name:
        issues.append(_issue(REQUIRED_FIELD, "표준단어명(standardName)은 필수입니다.", "standardName"))
    if not abbreviation and require_abbreviation:
        issues.append(_issue(REQUIRED_FIELD, "영문약어(abbreviation)는 필수입니다.", "abbreviation"))

    keyword = find_forbidden_keyword(standard_name, abbreviation, index.forbidden_words)
    if keyword is not None:
        issues.append(
            _issue(
                FORBIDDEN_WORD,
                f"금지된 단어({text(keyword.get('keyword'))})가 포함되어 있습니다.",
                "abbreviation" if keyword.get("type") == "abbreviation" else "standardName",
            )
        )
    elif standard_name:
        owners = others(entry, index.forbidden_owners.get(_key(standard_name), []))
        if owners:
            issues.append(
                _issue(
                    FORBIDDEN_WORD,
                    f"입력한 표준단어명({standard_name})은/는 [{text(owners[0].get('standardName'))}]의 "
                    "금칙어로 등록되어 있습니다.",
                    "standardName",
                )
            )

    if standard_name:
        owners = others(entry, index.synonym_owners.get(_key(standard_name), []))
        if owners:
            issues.append(
                _issue(
                    SYNONYM_CONFLICT,
                    f"입력한 표준단어명({standard_name})은/는 이미 "
                    f"[{text(owners[0].get('standardName'))}]의 이음동의어로 등록되어 있습니다.",
                    "standardName",
                )
            )

    if abbreviation and others(entry, index.abbreviations.get(_key(abbreviation), [])):
        issues.append(_issue(ABBREVIATION_DUPLICATE, "이미 존재하는 영문약어입니다.", "abbreviation"))

    return issues


def validate_vocabulary(
    entries: list[Mapping[str, Any]],
    forbidden_words: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    """Validate every word of one file against the file and the global forbidden list."""
    index = WordIndex.build(entries, forbidden_words=forbidden_words)
    return collect_failures(entries, lambda e: validate_word(e, index))
