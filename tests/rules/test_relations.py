"""Tests for metacat.rules.relations."""

from __future__ import annotations

import pytest

from metacat.rules.relations import (
    RELATION_SPECS,
    DesignContext,
    RelationUpdate,
    apply_updates,
    build_relation_sync_plan,
    validate_relations,
)
from tests._support import record


@pytest.fixture()
def context() -> DesignContext:
    return DesignContext(
        databases=[record(logicalDbName="LDB", physicalDbName="PDB")],
        entities=[
            record(id="e1", schemaName="S", entityName="사용자", tableKoreanName="사용자정보", logicalDbName="LDB"),
            record(id="e2", schemaName="S", entityName="기타", logicalDbName="UNKNOWN"),
        ],
        attributes=[record(id="a1", schemaName="S", entityName="사용자", attributeName="이름")],
        tables=[
            record(
                id="t1",
                schemaName="S",
                tableEnglishName="TB_USER",
                tableKoreanName="사용자정보",
                relatedEntityName="사용자정보",
                physicalDbName="PDB",
            ),
        ],
        columns=[
            record(
                id="c1",
                schemaName="S",
                tableEnglishName="tb_user",
                columnEnglishName="USER_NAME",
                columnKoreanName="사용자이름",
                relatedEntityName="사용자",
            ),
            record(id="c2", schemaName="S", tableEnglishName="사용자정보", columnEnglishName="USER_ID"),
        ],
    )


def _summary(report, relation_id):
    return next(s for s in report["summaries"] if s["relationId"] == relation_id)


class TestValidateRelations:
    def test_totals(self, context):
        report = validate_relations(context)

        assert len(report["specs"]) == len(RELATION_SPECS) == 6
        assert report["totals"] == {
            "totalChecked": 8,
            "matched": 5,
            "unmatched": 3,
            "errorCount": 2,
            "warningCount": 1,
        }

    def test_issue_shape(self, context):
        issue = _summary(validate_relations(context), "TABLE_COLUMN")["issues"][0]
        assert issue["targetId"] == "c2"
        assert issue["targetLabel"] == "USER_ID"
        assert issue["expectedKey"] == "S|사용자정보"
        assert issue["severity"] == "error"

    def test_entity_table_accepts_korean_name(self, context):
        assert _summary(validate_relations(context), "ENTITY_TABLE")["unmatched"] == 0

    def test_attribute_column_is_a_warning(self, context):
        summary = _summary(validate_relations(context), "ATTRIBUTE_COLUMN")
        assert summary["severity"] == "warning"
        assert summary["unmatched"] == 1

    def test_targets_with_empty_keys_skipped(self):
        report = validate_relations(DesignContext(tables=[record(physicalDbName="-")]))
        assert _summary(report, "DB_TABLE")["totalChecked"] == 0

    def test_empty_context(self):
        assert validate_relations(DesignContext())["totals"]["totalChecked"] == 0


class TestRelationSyncPlan:
    def test_table_related_entity_corrected(self, context):
        plan = build_relation_sync_plan(context)

        (update,) = plan.table_updates
        assert update.id == "t1"
        assert update.patch == {"relatedEntityName": "사용자"}

    def test_column_table_reference_corrected(self, context):
        plan = build_relation_sync_plan(context)

        (update,) = plan.column_updates
        assert update.id == "c2"
        assert update.patch == {"tableEnglishName": "TB_USER", "relatedEntityName": "사용자"}
        assert plan.counts["totalCandidates"] == 2
        assert plan.counts["fieldChanges"] == 3

    def test_attribute_suggestions(self, context):
        (suggestion,) = build_relation_sync_plan(context).suggestions
        assert suggestion["attributeId"] == "a1"
        assert [c["columnId"] for c in suggestion["candidates"]] == ["c1"]

    def test_ambiguous_match_left_alone(self, context):
        context.entities.append(record(schemaName="S", entityName="사용자2", tableKoreanName="사용자정보"))
        plan = build_relation_sync_plan(context)
        assert plan.table_updates == []

    def test_apply_updates(self):
        entries = [record(id="x", a="1"), record(id="y", a="2")]
        result, changed = apply_updates(entries, [RelationUpdate("y", {"a": "3"}, "y", "r")], "NOW")

        assert changed == 1
        assert result[0] is entries[0]
        assert result[1]["a"] == "3"
        assert result[1]["updatedAt"] == "NOW"
        assert entries[1]["a"] == "2"
