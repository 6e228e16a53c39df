"""
Term name generation from the vocabulary.

* :func:`convert_term` maps each underscore part of a name to the other
  language (standard name ↔ abbreviation); unknown parts become ``##``.
* :func:`segment_term` splits unspaced words into known vocabulary words
  and returns every combination.
* :func:`recommend_domains` proposes domain names for a term from the
  domain category of its last word.

Examples:
    >>> words = [{"standardName": "사용자", "abbreviation": "USER"},
    ...          {"standardName": "이름", "abbreviation": "NAME"}]
    >>> convert_term("사용자_이름_주소", word_lookup(words, KO_TO_EN))
    'USER_NAME_##'
    >>> segment_term("사용자이름", segment_words(words, KO_TO_EN))
    ['사용자_이름']
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from itertools import product
from typing import Any

from metacat.core.keys import text

KO_TO_EN = "ko-to-en"
EN_TO_KO = "en-to-ko"
DIRECTIONS = (KO_TO_EN, EN_TO_KO)
UNKNOWN_PART = "##"


def _fields(direction: str) -> tuple[str, str]:
    if direction == KO_TO_EN:
        return "standardName", "abbreviation"
    return "abbreviation", "standardName"


def word_lookup(vocabulary: Iterable[Mapping[str, Any]], direction: str) -> dict[str, str]:
    """Lower-cased source word → target word. Later entries win."""
    source, target = _fields(direction)
    lookup: dict[str, str] = {}
    for entry in vocabulary:
        key, value = text(entry.get(source)).lower(), text(entry.get(target))
        if key and value:
            lookup[key] = value
    return lookup


def convert_term(term: str, lookup: Mapping[str, str]) -> str:
    return "_".join(lookup.get(part.lower(), UNKNOWN_PART) for part in term.split("_"))


def segment_words(vocabulary: Iterable[Mapping[str, Any]], direction: str) -> set[str]:
    source, _ = _fields(direction)
    return {text(e.get(source)).lower() for e in vocabulary if text(e.get(source))}


def segment_word(word: str, words: set[str]) -> list[str]:
    """Every split of ``word`` into known words, in the word's original case.

    ``[UNKNOWN_PART]`` when no split covers the whole word.
    """
    lowered = word.lower()
    n = len(lowered)
    # splits[i]: every split of lowered[:i], as lists of end offsets
    splits: list[list[list[int]]] = [[] for _ in range(n + 1)]
    splits[0] = [[]]
    for end in range(1, n + 1):
        for start in range(end):
            if splits[start] and lowered[start:end] in words:
                splits[end].extend(prev + [end] for prev in splits[start])

    results = []
    for ends in splits[n]:
        bounds = [0, *ends]
        results.append("_".join(word[a:b] for a, b in zip(bounds, bounds[1:])))
    return results or [UNKNOWN_PART]


def segment_term(term: str, words: set[str]) -> list[str]:
    """Segment each space-separated word and join every combination with ``_``."""
    parts = [p for p in term.split(" ") if p]
    if not parts:
        return []
    return ["_".join(combo) for combo in product(*(segment_word(p, words) for p in parts))]


def last_segment(term_name: str) -> str:
    parts = [p.strip() for p in (term_name or "").split("_") if p.strip()]
    return parts[-1] if parts else ""


def recommend_domains(
    term_name: str,
    vocabulary: Iterable[Mapping[str, Any]],
    domains: Iterable[Mapping[str, Any]],
) -> dict[str, Any]:
    """Domain names whose category is mapped to the term's last word."""
    suffix = last_segment(term_name)
    result: dict[str, Any] = {
        "lastSegment": suffix,
        "matchedStandardNames": [],
        "matchedDomainCategories": [],
        "recommendations": [],
    }
    if not suffix:
        return result

    key = suffix.lower()
    categories: list[str] = []
    for entry in vocabulary:
        name = text(entry.get("standardName"))
        if not name or name.lower() != key:
            continue
        result["matchedStandardNames"].append(name)
        category = text(entry.get("domainCategory"))
        if category and entry.get("isDomainCategoryMapped") is not False and category not in categories:
            categories.append(category)
    result["matchedDomainCategories"] = categories
    if not categories:
        return result

    wanted = {c.lower() for c in categories}
    recommendations: list[str] = []
    for domain in domains:
        name = text(domain.get("standardDomainName"))
        if name and text(domain.get("domainCategory")).lower() in wanted and name not in recommendations:
            recommendations.append(name)
    result["recommendations"] = recommendations
    return result
