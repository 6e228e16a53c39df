"""
Prioritized validation issues shared by the vocabulary and domain validators.

Each validator owns a priority table; an issue carries the priority it was
created with so that lists from different rules sort together.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

REQUIRED_FIELD = "REQUIRED_FIELD"


@dataclass(frozen=True, slots=True)
class CatalogIssue:
    type: str
    message: str
    field: str
    priority: int

    @property
    def code(self) -> str:
        return self.type

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "priority": self.priority,
        }


def sort_issues(issues: Iterable[CatalogIssue]) -> list[CatalogIssue]:
    return sorted(issues, key=lambda i: i.priority)


def collect_failures(
    entries: list[Mapping[str, Any]],
    check: Callable[[Mapping[str, Any]], list[CatalogIssue]],
    *,
    extra: Callable[[Mapping[str, Any]], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Run ``check`` on every entry and build the ``validate-all`` summary."""
    failed: list[dict[str, Any]] = []
    for entry in entries:
        issues = check(entry)
        if not issues:
            continue
        item: dict[str, Any] = {"entry": entry, "errors": [i.to_dict() for i in sort_issues(issues)]}
        if extra is not None:
            item.update(extra(entry))
        failed.append(item)
    return {
        "totalCount": len(entries),
        "failedCount": len(failed),
        "passedCount": len(entries) - len(failed),
        "failedEntries": failed,
    }


def others(entry: Mapping[str, Any], candidates: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """``candidates`` without ``entry`` itself (same object or same non-empty id)."""
    own_id = entry.get("id")
    return [c for c in candidates if c is not entry and not (own_id and c.get("id") == own_id)]
