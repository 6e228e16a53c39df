"""
Domain validator.

Rules, highest priority first::

    1 REQUIRED_FIELD         domainCategory or physicalDataType is blank
    2 DOMAIN_NAME_MISMATCH   stored standardDomainName differs from the generated name
    3 DOMAIN_NAME_DUPLICATE  another domain generates the same name

The generated name is ``{category}_{type}[({length})][.{decimal}]`` (see
:func:`metacat.core.models.generate_domain_name`).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from metacat.core.keys import text
from metacat.core.models import generate_domain_name
from metacat.rules.issues import REQUIRED_FIELD, CatalogIssue, collect_failures, others

DOMAIN_NAME_MISMATCH = "DOMAIN_NAME_MISMATCH"
DOMAIN_NAME_DUPLICATE = "DOMAIN_NAME_DUPLICATE"

DOMAIN_ERROR_PRIORITY: dict[str, int] = {
    REQUIRED_FIELD: 1,
    DOMAIN_NAME_MISMATCH: 2,
    DOMAIN_NAME_DUPLICATE: 3,
}


def _issue(kind: str, message: str, field_name: str) -> CatalogIssue:
    return CatalogIssue(kind, message, field_name, DOMAIN_ERROR_PRIORITY[kind])


def expected_domain_name(entry: Mapping[str, Any]) -> str:
    return generate_domain_name(
        text(entry.get("domainCategory")),
        text(entry.get("physicalDataType")),
        entry.get("dataLength"),
        entry.get("decimalPlaces"),
    )


def required_issues(entry: Mapping[str, Any]) -> list[CatalogIssue]:
    issues = []
    if not text(entry.get("domainCategory")):
        issues.append(_issue(REQUIRED_FIELD, "도메인 분류명이 필요합니다.", "domainCategory"))
    if not text(entry.get("physicalDataType")):
        issues.append(_issue(REQUIRED_FIELD, "물리 데이터타입이 필요합니다.", "physicalDataType"))
    return issues


def validate_domains(entries: list[Mapping[str, Any]]) -> dict[str, Any]:
    """Validate every domain of one file; duplicates are counted within the file."""
    generated = {id(e): expected_domain_name(e) for e in entries}
    counts = Counter(generated.values())

    def check(entry: Mapping[str, Any]) -> list[CatalogIssue]:
        name = generated[id(entry)]
        issues = required_issues(entry)
        if entry.get("standardDomainName") != name:
            issues.append(
                _issue(
                    DOMAIN_NAME_MISMATCH,
                    f"표준도메인명과 계산값이 다릅니다. 기대값: {name}",
                    "standardDomainName",
                )
            )
        if counts[name] > 1:
            issues.append(_issue(DOMAIN_NAME_DUPLICATE, "생성되는 표준도메인명이 중복됩니다.", "standardDomainName"))
        return issues

    return collect_failures(entries, check, extra=lambda e: {"generatedDomainName": generated[id(e)]})


def check_domain_draft(
    draft: Mapping[str, Any],
    peers: Iterable[Mapping[str, Any]],
) -> tuple[str, list[CatalogIssue]]:
    """Generated name and issues of a domain about to be saved.

    ``peers`` are the domains of every file; the draft's own id is skipped.
    The duplicate check only runs once the required fields are present.
    """
    name = expected_domain_name(draft)
    issues = required_issues(draft)
    if issues:
        return name, issues
    key = name.lower()
    if any(text(p.get("standardDomainName")).lower() == key for p in others(draft, peers)):
        issues.append(_issue(DOMAIN_NAME_DUPLICATE, f"이미 존재하는 도메인명입니다: {name}", "standardDomainName"))
    return name, issues
