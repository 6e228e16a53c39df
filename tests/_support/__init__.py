"""
Test support utilities for metacat tests.

Record builders that don't fit as pytest fixtures but are used across
multiple test modules::

    from tests._support import term, word

    seed(CatalogType.TERM, [term("사용자_이름", "USER_NAME")])
"""

from __future__ import annotations

import uuid
from typing import Any

from metacat.core.models import now_iso


def _base(**fields: Any) -> dict[str, Any]:
    now = now_iso()
    return {"id": fields.pop("id", None) or str(uuid.uuid4()), "createdAt": now, "updatedAt": now, **fields}


def word(standard_name: str, abbreviation: str, english_name: str | None = None, **extra: Any) -> dict[str, Any]:
    """Vocabulary entry."""
    return _base(
        standardName=standard_name,
        abbreviation=abbreviation,
        englishName=english_name or abbreviation.title(),
        description="",
        **extra,
    )


def domain(
    category: str,
    physical_type: str,
    length: str | None = None,
    *,
    group: str = "공통",
    **extra: Any,
) -> dict[str, Any]:
    """Domain entry with its generated standardDomainName."""
    fields: dict[str, Any] = {
        "domainGroup": group,
        "domainCategory": category,
        "physicalDataType": physical_type,
        "standardDomainName": f"{category}_{physical_type}" + (f"({length})" if length else ""),
    }
    if length:
        fields["dataLength"] = length
    return _base(**fields, **extra)


def term(term_name: str, column_name: str, domain_name: str = "", **extra: Any) -> dict[str, Any]:
    return _base(termName=term_name, columnName=column_name, domainName=domain_name, **extra)


def record(**fields: Any) -> dict[str, Any]:
    """Design catalog entry (database, entity, attribute, table, column)."""
    return _base(**fields)
