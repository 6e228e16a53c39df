"""
Design-relation validation and sync planning.

Six relation specs check that design catalogs reference each other::

    DB_ENTITY         entity.logicalDbName              in database.logicalDbName
    DB_TABLE          table.physicalDbName              in database.physicalDbName
    ENTITY_ATTRIBUTE  attribute (schema, entity)        in entity (schema, entityName)
    ENTITY_TABLE      table (schema, relatedEntity)     in entity (schema, entityName | tableKoreanName)
    TABLE_COLUMN      column (schema, table)            in table (schema, tableEnglishName)
    ATTRIBUTE_COLUMN  attribute (schema, entity, name)  in column (schema, relatedEntity, koreanName)

Targets whose key has an empty component are not checked. ``ATTRIBUTE_COLUMN``
is advisory (warning severity); every other spec reports errors.

The sync plan corrects table ``relatedEntityName`` values and column
table references that can be resolved unambiguously.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from metacat.core.keys import build_composite_key, normalize_key, text

Record = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class RelationSpec:
    id: str
    name: str
    source_type: str
    target_type: str
    mapping_key: str
    cardinality: str
    severity: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sourceType": self.source_type,
            "targetType": self.target_type,
            "mappingKey": self.mapping_key,
            "cardinality": self.cardinality,
            "severity": self.severity,
            "description": self.description,
        }


RELATION_SPECS: tuple[RelationSpec, ...] = (
    RelationSpec(
        "DB_ENTITY",
        "데이터베이스 -> 엔터티",
        "database",
        "entity",
        "logicalDbName",
        "1:N",
        "error",
        "엔터티의 logicalDbName이 데이터베이스 logicalDbName에 존재해야 합니다.",
    ),
    RelationSpec(
        "DB_TABLE",
        "데이터베이스 -> 테이블",
        "database",
        "table",
        "physicalDbName",
        "1:N",
        "error",
        "테이블의 physicalDbName이 데이터베이스 physicalDbName에 존재해야 합니다.",
    ),
    RelationSpec(
        "ENTITY_ATTRIBUTE",
        "엔터티 -> 속성",
        "entity",
        "attribute",
        "schemaName + entityName",
        "1:N",
        "error",
        "속성의 schemaName/entityName 조합이 엔터티에 존재해야 합니다.",
    ),
    RelationSpec(
        "ENTITY_TABLE",
        "엔터티 -> 테이블",
        "entity",
        "table",
        "schemaName + relatedEntityName(entityName)",
        "1:N",
        "error",
        "테이블의 schemaName/relatedEntityName 조합이 엔터티 schemaName/entityName"
        "(보조: tableKoreanName)에 존재해야 합니다.",
    ),
    RelationSpec(
        "TABLE_COLUMN",
        "테이블 -> 컬럼",
        "table",
        "column",
        "schemaName + tableEnglishName",
        "1:N",
        "error",
        "컬럼의 schemaName/tableEnglishName 조합이 테이블에 존재해야 합니다.",
    ),
    RelationSpec(
        "ATTRIBUTE_COLUMN",
        "속성 -> 컬럼(보조)",
        "attribute",
        "column",
        "schemaName + entityName(relatedEntityName) + attributeName(columnKoreanName)",
        "1:1",
        "warning",
        "속성과 컬럼의 논리-물리 연결 후보를 점검합니다. 불일치는 경고로 취급합니다.",
    ),
)


@dataclass(slots=True)
class DesignContext:
    """Entries of the five design catalogs, one file each."""

    databases: list[dict[str, Any]] = field(default_factory=list)
    entities: list[dict[str, Any]] = field(default_factory=list)
    attributes: list[dict[str, Any]] = field(default_factory=list)
    tables: list[dict[str, Any]] = field(default_factory=list)
    columns: list[dict[str, Any]] = field(default_factory=list)


def _label(record: Record, *fields: str) -> str:
    for name in fields:
        value = text(record.get(name))
        if value:
            return value
    return text(record.get("id"))


def _key_set(records: Iterable[Record], *fields: str) -> set[str]:
    keys = {build_composite_key([r.get(f) for f in fields]) for r in records}
    keys.discard("")
    return keys


# ── Validation ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class _Check:
    """How one spec is evaluated: targets, key fields, accepted keys, issue text."""

    spec_id: str
    targets: Callable[[DesignContext], list[dict[str, Any]]]
    key_fields: tuple[str, ...]
    accepted: Callable[[DesignContext], set[str]]
    label_fields: tuple[str, ...]
    reason: str


_CHECKS: tuple[_Check, ...] = (
    _Check(
        "DB_ENTITY",
        lambda c: c.entities,
        ("logicalDbName",),
        lambda c: _key_set(c.databases, "logicalDbName"),
        ("entityName", "tableKoreanName"),
        "참조하는 logicalDbName이 데이터베이스 정의서에 없습니다.",
    ),
    _Check(
        "DB_TABLE",
        lambda c: c.tables,
        ("physicalDbName",),
        lambda c: _key_set(c.databases, "physicalDbName"),
        ("tableEnglishName", "tableKoreanName"),
        "참조하는 physicalDbName이 데이터베이스 정의서에 없습니다.",
    ),
    _Check(
        "ENTITY_ATTRIBUTE",
        lambda c: c.attributes,
        ("schemaName", "entityName"),
        lambda c: _key_set(c.entities, "schemaName", "entityName"),
        ("attributeName",),
        "속성이 참조하는 schema/entity 조합이 엔터티 정의서에 없습니다.",
    ),
    _Check(
        "ENTITY_TABLE",
        lambda c: c.tables,
        ("schemaName", "relatedEntityName"),
        lambda c: _key_set(c.entities, "schemaName", "entityName")
        | _key_set(c.entities, "schemaName", "tableKoreanName"),
        ("tableEnglishName", "tableKoreanName"),
        "테이블의 relatedEntityName이 엔터티 정의서(entityName/tableKoreanName)에 없습니다.",
    ),
    _Check(
        "TABLE_COLUMN",
        lambda c: c.columns,
        ("schemaName", "tableEnglishName"),
        lambda c: _key_set(c.tables, "schemaName", "tableEnglishName"),
        ("columnEnglishName", "columnKoreanName"),
        "컬럼이 참조하는 schema/table 조합이 테이블 정의서에 없습니다.",
    ),
    _Check(
        "ATTRIBUTE_COLUMN",
        lambda c: c.attributes,
        ("schemaName", "entityName", "attributeName"),
        lambda c: _key_set(c.columns, "schemaName", "relatedEntityName", "columnKoreanName"),
        ("attributeName",),
        "속성명 기준으로 연결 가능한 컬럼(relatedEntityName + columnKoreanName)을 찾지 못했습니다.",
    ),
)


def validate_relations(context: DesignContext) -> dict[str, Any]:
    """Check every relation spec; returns ``{specs, summaries, totals}``."""
    specs = {s.id: s for s in RELATION_SPECS}
    summaries: list[dict[str, Any]] = []

    for check in _CHECKS:
        spec = specs[check.spec_id]
        accepted = check.accepted(context)
        summary: dict[str, Any] = {
            "relationId": spec.id,
            "relationName": spec.name,
            "totalChecked": 0,
            "matched": 0,
            "unmatched": 0,
            "severity": spec.severity,
            "mappingKey": spec.mapping_key,
            "issues": [],
        }
        for target in check.targets(context):
            key = build_composite_key([target.get(f) for f in check.key_fields])
            if not key:
                continue
            summary["totalChecked"] += 1
            if key in accepted:
                summary["matched"] += 1
                continue
            summary["unmatched"] += 1
            summary["issues"].append(
                {
                    "relationId": spec.id,
                    "severity": spec.severity,
                    "sourceType": spec.source_type,
                    "targetType": spec.target_type,
                    "targetId": text(target.get("id")),
                    "targetLabel": _label(target, *check.label_fields),
                    "expectedKey": "|".join(text(target.get(f)) for f in check.key_fields),
                    "reason": check.reason,
                }
            )
        summaries.append(summary)

    totals = {"totalChecked": 0, "matched": 0, "unmatched": 0, "errorCount": 0, "warningCount": 0}
    for summary in summaries:
        totals["totalChecked"] += summary["totalChecked"]
        totals["matched"] += summary["matched"]
        totals["unmatched"] += summary["unmatched"]
        if summary["severity"] == "error":
            totals["errorCount"] += summary["unmatched"]
        else:
            totals["warningCount"] += summary["unmatched"]

    return {
        "specs": [s.to_dict() for s in RELATION_SPECS],
        "summaries": summaries,
        "totals": totals,
    }


# ── Sync plan ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RelationUpdate:
    id: str
    patch: dict[str, str]
    target_label: str
    reason: str


@dataclass(slots=True)
class RelationSyncPlan:
    table_updates: list[RelationUpdate] = field(default_factory=list)
    column_updates: list[RelationUpdate] = field(default_factory=list)
    changes: list[dict[str, Any]] = field(default_factory=list)
    suggestions: list[dict[str, Any]] = field(default_factory=list)

    @property
    def counts(self) -> dict[str, int]:
        return {
            "tableCandidates": len(self.table_updates),
            "columnCandidates": len(self.column_updates),
            "totalCandidates": len(self.table_updates) + len(self.column_updates),
            "fieldChanges": len(self.changes),
            "attributeColumnSuggestions": len(self.suggestions),
        }


def _key(*values: Any) -> str:
    return "|".join(normalize_key(v) for v in values)


def _group(records: Iterable[dict[str, Any]], *fields: str) -> dict[str, list[dict[str, Any]]]:
    groups: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for record in records:
        values = [normalize_key(record.get(f)) for f in fields]
        if all(values):
            groups["|".join(values)].append(record)
    return groups


def _apply_patches(records: list[dict[str, Any]], updates: list[RelationUpdate]) -> list[dict[str, Any]]:
    patches = {u.id: u.patch for u in updates}
    return [{**r, **patches.get(text(r.get("id")), {})} for r in records]


def _plan_tables(context: DesignContext, plan: RelationSyncPlan) -> None:
    by_name = _group(context.entities, "schemaName", "entityName")
    by_korean = _group(context.entities, "schemaName", "tableKoreanName")

    for table in context.tables:
        schema = normalize_key(table.get("schemaName"))
        if not schema:
            continue
        related = normalize_key(table.get("relatedEntityName"))
        korean = normalize_key(table.get("tableKoreanName"))

        candidates: list[dict[str, Any]] = []
        reason = ""
        if related:
            if _key(schema, related) in by_name:
                continue
            candidates = by_korean.get(_key(schema, related), [])
            reason = "relatedEntityName이 엔터티 한글명과 일치하여 엔터티명으로 보정"
        elif korean:
            candidates = by_korean.get(_key(schema, korean), [])
            reason = "tableKoreanName과 일치하는 엔터티를 찾아 relatedEntityName을 보정"

        if len(candidates) != 1:
            continue
        canonical = text(candidates[0].get("entityName"))
        before = text(table.get("relatedEntityName"))
        if not canonical or canonical == before:
            continue

        label = _label(table, "tableEnglishName", "tableKoreanName")
        plan.table_updates.append(
            RelationUpdate(text(table.get("id")), {"relatedEntityName": canonical}, label, reason)
        )
        plan.changes.append(
            {
                "targetType": "table",
                "targetId": text(table.get("id")),
                "targetLabel": label,
                "field": "relatedEntityName",
                "before": before,
                "after": canonical,
                "reason": reason,
            }
        )


def _match_table(
    column: Record,
    by_schema_korean: dict[str, list[dict[str, Any]]],
    by_english: dict[str, list[dict[str, Any]]],
    by_schema_entity: dict[str, list[dict[str, Any]]],
) -> tuple[dict[str, Any] | None, str]:
    schema = normalize_key(column.get("schemaName"))
    table_name = normalize_key(column.get("tableEnglishName"))
    related = normalize_key(column.get("relatedEntityName"))

    if schema and table_name:
        found = by_schema_korean.get(_key(schema, table_name), [])
        if len(found) == 1:
            return found[0], "컬럼 tableEnglishName이 테이블 한글명으로 입력되어 영문명으로 보정"
    if table_name:
        found = by_english.get(table_name, [])
        if len(found) == 1:
            return found[0], "tableEnglishName 단일 매칭으로 schema/relatedEntity를 보정"
    if schema and related:
        found = by_schema_entity.get(_key(schema, related), [])
        if len(found) == 1:
            return found[0], "schema+relatedEntityName 단일 매칭으로 tableEnglishName을 보정"
    return None, ""


def _plan_columns(tables: list[dict[str, Any]], columns: list[dict[str, Any]], plan: RelationSyncPlan) -> None:
    known = _key_set(tables, "schemaName", "tableEnglishName")
    by_schema_korean = _group(tables, "schemaName", "tableKoreanName")
    by_english = _group(tables, "tableEnglishName")
    by_schema_entity = _group(tables, "schemaName", "relatedEntityName")

    for column in columns:
        if build_composite_key([column.get("schemaName"), column.get("tableEnglishName")]) in known:
            continue
        table, reason = _match_table(column, by_schema_korean, by_english, by_schema_entity)
        if table is None:
            continue

        patch: dict[str, str] = {}
        for name in ("schemaName", "tableEnglishName", "relatedEntityName"):
            value = text(table.get(name))
            if value and value != (column.get(name) or ""):
                patch[name] = value
        if not patch:
            continue

        label = _label(column, "columnEnglishName", "columnKoreanName")
        column_id = text(column.get("id"))
        plan.column_updates.append(RelationUpdate(column_id, patch, label, reason))
        for name, after in patch.items():
            plan.changes.append(
                {
                    "targetType": "column",
                    "targetId": column_id,
                    "targetLabel": label,
                    "field": name,
                    "before": text(column.get(name)),
                    "after": after,
                    "reason": reason,
                }
            )


def _attribute_suggestions(attributes: list[dict[str, Any]], columns: list[dict[str, Any]]) -> list[dict[str, Any]]:
    by_entity = _group(columns, "schemaName", "relatedEntityName")
    exact = _key_set(columns, "schemaName", "relatedEntityName", "columnKoreanName")
    suggestions: list[dict[str, Any]] = []

    for attribute in attributes:
        schema = normalize_key(attribute.get("schemaName"))
        entity = normalize_key(attribute.get("entityName"))
        name = normalize_key(attribute.get("attributeName"))
        if not (schema and entity and name) or _key(schema, entity, name) in exact:
            continue

        candidates = []
        for column in by_entity.get(_key(schema, entity), []):
            korean = normalize_key(column.get("columnKoreanName"))
            if korean and (name in korean or korean in name):
                candidates.append(
                    {
                        "columnId": text(column.get("id")),
                        "columnLabel": _label(column, "columnEnglishName", "columnKoreanName"),
                        "schemaName": column.get("schemaName"),
                        "tableEnglishName": column.get("tableEnglishName"),
                        "relatedEntityName": column.get("relatedEntityName"),
                    }
                )
            if len(candidates) == 3:
                break
        if not candidates:
            continue

        suggestions.append(
            {
                "attributeId": text(attribute.get("id")),
                "attributeName": _label(attribute, "attributeName"),
                "schemaName": text(attribute.get("schemaName")),
                "entityName": text(attribute.get("entityName")),
                "candidates": candidates,
            }
        )
    return suggestions


def build_relation_sync_plan(context: DesignContext) -> RelationSyncPlan:
    """Plan table and column corrections; column fixes see the corrected tables."""
    plan = RelationSyncPlan()
    _plan_tables(context, plan)
    tables = _apply_patches(context.tables, plan.table_updates)
    _plan_columns(tables, context.columns, plan)
    columns = _apply_patches(context.columns, plan.column_updates)
    plan.suggestions = _attribute_suggestions(context.attributes, columns)
    return plan


def apply_updates(entries: list[dict[str, Any]], updates: list[RelationUpdate], now: str) -> tuple[list[dict[str, Any]], int]:
    """Patch entries by id; returns the new list and how many entries changed."""
    patches = {u.id: u.patch for u in updates}
    result: list[dict[str, Any]] = []
    changed = 0
    for entry in entries:
        patch = patches.get(text(entry.get("id")))
        if patch:
            entry = {**entry, **patch, "updatedAt": now}
            changed += 1
        result.append(entry)
    return result, changed
