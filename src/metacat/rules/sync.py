"""
Synchronization planners.

Pure functions computing what a sync run would change; the ops layer
loads the catalogs, calls a planner and saves the result when applying.

* :func:`plan_column_sync` derives column fields from the term → domain chain.
* :func:`plan_term_sync` recomputes term mapping flags.
* :func:`plan_vocabulary_domain_sync` maps vocabulary domain categories to groups.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import text
from metacat.rules.mapping import build_domain_map, build_vocabulary_map, check_term_mapping

RESULT_LIMIT = 100

# ── Column / term ────────────────────────────────────────────────────────

# column field <- (source, source field)
COLUMN_DERIVATIONS: tuple[tuple[str, str, str], ...] = (
    ("columnKoreanName", "term", "termName"),
    ("domainName", "term", "domainName"),
    ("dataType", "domain", "physicalDataType"),
    ("dataLength", "domain", "dataLength"),
    ("dataDecimalLength", "domain", "decimalPlaces"),
)


@dataclass(slots=True)
class ColumnSyncPlan:
    entries: list[dict[str, Any]]
    matched: int = 0
    unmatched: int = 0
    matched_domain: int = 0
    unmatched_domain: int = 0
    updated: int = 0
    unmatched_columns: list[dict[str, Any]] = field(default_factory=list)
    issues: list[dict[str, Any]] = field(default_factory=list)
    changes: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    def summary(self) -> dict[str, Any]:
        return {
            "matched": self.matched,
            "unmatched": self.unmatched,
            "matchedDomain": self.matched_domain,
            "unmatchedDomain": self.unmatched_domain,
            "updated": self.updated,
            "total": self.total,
            "unmatchedColumns": self.unmatched_columns[:RESULT_LIMIT],
            "issues": self.issues[:RESULT_LIMIT],
            "changes": self.changes[:RESULT_LIMIT],
        }


def _issue(column: Mapping[str, Any], code: str, level: str, message: str) -> dict[str, Any]:
    return {
        "id": text(column.get("id")),
        "columnEnglishName": text(column.get("columnEnglishName")),
        "tableEnglishName": text(column.get("tableEnglishName")),
        "code": code,
        "level": level,
        "message": message,
    }


def plan_column_sync(
    columns: Iterable[Mapping[str, Any]],
    terms: Iterable[Mapping[str, Any]],
    domains: Iterable[Mapping[str, Any]],
    *,
    now: str,
) -> ColumnSyncPlan:
    """Match columns to terms by column name and derive fields from term and domain.

    A derived field is only written when non-empty and different from the
    stored value, so a second run over its own output changes nothing.
    """
    term_map: dict[str, Mapping[str, Any]] = {}
    for term in terms:
        key = text(term.get("columnName")).lower()
        if key:
            term_map[key] = term
    domain_map = build_domain_map(domains)

    synced: list[dict[str, Any]] = []
    plan = ColumnSyncPlan(entries=synced)

    for column in columns:
        column = dict(column)
        synced.append(column)
        name = text(column.get("columnEnglishName"))
        if not name:
            plan.unmatched += 1
            plan.unmatched_columns.append(
                {"id": text(column.get("id")), "columnEnglishName": "(빈값)", "tableEnglishName": text(column.get("tableEnglishName"))}
            )
            plan.issues.append(_issue(column, "COLUMN_NAME_EMPTY", "error", "컬럼영문명이 비어 있습니다."))
            continue

        term = term_map.get(name.lower())
        if term is None:
            plan.unmatched += 1
            plan.unmatched_columns.append(
                {"id": text(column.get("id")), "columnEnglishName": name, "tableEnglishName": text(column.get("tableEnglishName"))}
            )
            plan.issues.append(
                _issue(column, "TERM_NOT_FOUND", "error", f"컬럼명 '{name}'에 해당하는 용어가 없습니다.")
            )
            continue

        plan.matched += 1
        sources: dict[str, Mapping[str, Any] | None] = {"term": term, "domain": None}
        domain_name = text(term.get("domainName"))
        domain = domain_map.get(domain_name.lower()) if domain_name else None
        if domain is not None:
            plan.matched_domain += 1
            sources["domain"] = domain
        else:
            plan.unmatched_domain += 1
            plan.issues.append(
                _issue(
                    column,
                    "DOMAIN_NOT_FOUND",
                    "warning",
                    f"용어 '{text(term.get('termName'))}'의 도메인명 '{domain_name}'을(를) 찾을 수 없습니다.",
                )
            )

        changed = False
        for target, source_name, source_field in COLUMN_DERIVATIONS:
            source = sources[source_name]
            if source is None:
                continue
            after = text(source.get(source_field))
            before = text(column.get(target))
            if not after or after == before:
                continue
            column[target] = after
            changed = True
            plan.changes.append(
                {"id": text(column.get("id")), "columnEnglishName": name, "field": target, "before": before, "after": after}
            )
        if changed:
            column["updatedAt"] = now
            plan.updated += 1

    return plan


# ── Term flags ───────────────────────────────────────────────────────────


@dataclass(slots=True)
class TermSyncPlan:
    entries: list[dict[str, Any]]
    updated: int = 0
    matched_term: int = 0
    matched_column: int = 0
    matched_domain: int = 0

    def summary(self) -> dict[str, Any]:
        return {
            "updated": self.updated,
            "matchedTerm": self.matched_term,
            "matchedColumn": self.matched_column,
            "matchedDomain": self.matched_domain,
            "total": len(self.entries),
        }


_FLAG_FIELDS = ("isMappedTerm", "isMappedColumn", "isMappedDomain", "unmappedTermParts", "unmappedColumnParts")


def term_flags(
    term: Mapping[str, Any],
    vocabulary_map: Mapping[str, Any],
    domain_map: Mapping[str, Any],
) -> dict[str, Any]:
    result = check_term_mapping(
        term.get("termName"), term.get("columnName"), term.get("domainName"), vocabulary_map, domain_map
    )
    return result.as_fields()


def plan_term_sync(
    terms: Iterable[Mapping[str, Any]],
    vocabulary: Iterable[Mapping[str, Any]],
    domains: Iterable[Mapping[str, Any]],
    *,
    now: str,
) -> TermSyncPlan:
    vocabulary_map = build_vocabulary_map(vocabulary)
    domain_map = build_domain_map(domains)
    synced: list[dict[str, Any]] = []
    plan = TermSyncPlan(entries=synced)

    for term in terms:
        flags = term_flags(term, vocabulary_map, domain_map)
        entry = dict(term)
        if any(entry.get(k) != flags[k] for k in _FLAG_FIELDS):
            entry.update(flags)
            entry["updatedAt"] = now
            plan.updated += 1
        plan.matched_term += bool(flags["isMappedTerm"])
        plan.matched_column += bool(flags["isMappedColumn"])
        plan.matched_domain += bool(flags["isMappedDomain"])
        synced.append(entry)

    return plan


# ── Vocabulary / domain ──────────────────────────────────────────────────


@dataclass(slots=True)
class VocabularyDomainPlan:
    entries: list[dict[str, Any]]
    updated: int = 0
    matched: int = 0
    unmatched: int = 0

    def summary(self) -> dict[str, Any]:
        return {
            "updated": self.updated,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "total": len(self.entries),
        }


def plan_vocabulary_domain_sync(
    vocabulary: Iterable[Mapping[str, Any]],
    domains: Iterable[Mapping[str, Any]],
    *,
    now: str,
) -> VocabularyDomainPlan:
    """Set domainGroup and isDomainCategoryMapped from the domain catalog."""
    groups: dict[str, str] = {}
    for domain in domains:
        category = text(domain.get("domainCategory")).lower()
        group = text(domain.get("domainGroup"))
        if category and group:
            groups.setdefault(category, group)

    synced: list[dict[str, Any]] = []
    plan = VocabularyDomainPlan(entries=synced)
    for word in vocabulary:
        entry = dict(word)
        synced.append(entry)
        category = text(entry.get("domainCategory")).lower()
        group = groups.get(category) if category else None

        if group is None:
            plan.unmatched += 1
            if entry.get("isDomainCategoryMapped") is not False:
                entry["isDomainCategoryMapped"] = False
                entry["updatedAt"] = now
                plan.updated += 1
            continue

        plan.matched += 1
        if entry.get("domainGroup") != group or entry.get("isDomainCategoryMapped") is not True:
            entry["domainGroup"] = group
            entry["isDomainCategoryMapped"] = True
            entry["updatedAt"] = now
            plan.updated += 1

    return plan
