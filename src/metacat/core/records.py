"""
Generic record querying: search, column filters, multi-key sort, pages.

Works on any catalog because records are accessed only through a field
accessor (``record.get(field)`` by default). List endpoints of every
catalog type share this code.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

Record = Mapping[str, Any]
Accessor = Callable[[Record, str], Any]


def default_accessor(record: Record, name: str) -> Any:
    return record.get(name)


@dataclass(frozen=True, slots=True)
class SortKey:
    field: str
    direction: str = "asc"


@dataclass(frozen=True, slots=True)
class Page:
    """One page of records plus the pagination block returned by list endpoints."""

    items: list[dict[str, Any]]
    current_page: int
    total_pages: int
    total_count: int
    limit: int

    def pagination(self) -> dict[str, Any]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "limit": self.limit,
            "hasNextPage": self.current_page < self.total_pages,
            "hasPrevPage": self.current_page > 1,
        }


def search(
    records: Iterable[Record],
    query: str | None,
    fields: Sequence[str],
    *,
    field: str | None = None,
    exact: bool = False,
    accessor: Accessor = default_accessor,
) -> list[Record]:
    """Case-insensitive substring (or exact) search on one field or all ``fields``."""
    items = list(records)
    needle = (query or "").strip().lower()
    if not needle:
        return items
    targets = [field] if field and field != "all" else list(fields)

    def matches(record: Record) -> bool:
        for name in targets:
            value = accessor(record, name)
            if value is None:
                continue
            text = str(value).lower()
            if (text == needle) if exact else (needle in text):
                return True
        return False

    return [r for r in items if matches(r)]


def apply_filters(
    records: Iterable[Record],
    filters: Mapping[str, str],
    *,
    accessor: Accessor = default_accessor,
) -> list[Record]:
    """Keep records whose every filtered column contains the filter value."""
    active = {k: v.lower() for k, v in filters.items() if v}
    if not active:
        return list(records)
    return [
        r
        for r in records
        if all(
            accessor(r, k) is not None and v in str(accessor(r, k)).lower()
            for k, v in active.items()
        )
    ]


def sort_records(
    records: Iterable[Record],
    keys: Sequence[SortKey],
    *,
    accessor: Accessor = default_accessor,
) -> list[Record]:
    """Sort by ``keys`` in order; ``None`` values last; ties by updatedAt desc."""

    def compare(a: Record, b: Record) -> int:
        for key in keys:
            av, bv = accessor(a, key.field), accessor(b, key.field)
            if av is None and bv is None:
                continue
            if av is None:
                return 1
            if bv is None:
                return -1
            sa, sb = str(av), str(bv)
            if sa != sb:
                cmp = -1 if sa < sb else 1
                return -cmp if key.direction == "desc" else cmp
        ua, ub = str(a.get("updatedAt") or ""), str(b.get("updatedAt") or "")
        if ua == ub:
            return 0
        return -1 if ua > ub else 1

    return sorted(records, key=cmp_to_key(compare))


def paginate(records: Sequence[Record], *, page: int, limit: int) -> Page:
    total = len(records)
    start = (page - 1) * limit
    return Page(
        items=[dict(r) for r in records[start : start + limit]],
        current_page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
        total_count=total,
        limit=limit,
    )


def distinct_values(
    records: Iterable[Record],
    fields: Sequence[str],
    *,
    accessor: Accessor = default_accessor,
) -> dict[str, list[str]]:
    """Sorted distinct non-empty values per field (filter-option lists)."""
    out: dict[str, set[str]] = {f: set() for f in fields}
    for record in records:
        for name in fields:
            value = accessor(record, name)
            if value is not None and str(value).strip():
                out[name].add(str(value).strip())
    return {k: sorted(v) for k, v in out.items()}
