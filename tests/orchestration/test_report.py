"""Tests for metacat.orchestration.report."""

from __future__ import annotations

from typing import Any

import pytest

from metacat.core.models import CatalogType
from metacat.ops.context import OperationContext
from metacat.ops.requests import ValidationReportRequest
from metacat.orchestration.report import (
    RELATION_FETCH_FAILED,
    TERM_FETCH_FAILED,
    build_validation_report,
)
from metacat.orchestration.steps import InProcessStepClient, StepOperation, StepResponse
from tests._support import record, term


class CannedStepClient:
    def __init__(self, responses: dict[StepOperation, StepResponse]):
        self.responses = responses
        self.calls: list[StepOperation] = []

    async def call(self, operation: StepOperation, payload: dict[str, Any]) -> StepResponse:
        self.calls.append(operation)
        return self.responses[operation]


TERM_DATA = {
    "totalCount": 2,
    "passedCount": 0,
    "failedCount": 2,
    "failedEntries": [
        {
            "entry": {"id": "t1", "termName": "사용자"},
            "errors": [{"type": "TERM_NAME_LENGTH", "code": "TERM_NAME_LENGTH", "message": "m1", "priority": 1, "level": "error"}],
            "suggestions": {"reason": "r", "metadata": {}, "actionType": "DELETE_TERM"},
        },
        {
            "entry": {"id": "t2", "termName": "가_나"},
            "errors": [{"type": "DOMAIN_NAME_MAPPING", "code": "DOMAIN_NAME_MAPPING", "message": "m2", "priority": 8, "level": "error"}],
        },
    ],
}

RELATION_DATA = {
    "files": {"table": "table.json"},
    "validation": {
        "summaries": [
            {"issues": [{"relationId": "TABLE_COLUMN", "severity": "error", "targetId": "c1", "targetLabel": "C1", "reason": "r"}]},
            {"issues": [{"relationId": "ATTRIBUTE_COLUMN", "severity": "warning", "targetId": "a1", "targetLabel": "A1", "reason": "w"}]},
        ],
        "totals": {"totalChecked": 5, "matched": 3, "unmatched": 2, "errorCount": 1, "warningCount": 1},
    },
}


def _ok(data):
    return StepResponse(200, {"success": True, "data": data})


@pytest.mark.asyncio
async def test_issue_ordering_and_summary():
    client = CannedStepClient(
        {StepOperation.TERM_VALIDATE_ALL: _ok(TERM_DATA), StepOperation.RELATION_VALIDATE: _ok(RELATION_DATA)}
    )

    result = await build_validation_report(client, ValidationReportRequest())

    issues = result.data["issues"]
    assert [(i["source"], i["level"], i["code"]) for i in issues] == [
        ("term", "error", "DOMAIN_NAME_MAPPING"),
        ("relation", "error", "RELATION_TABLE_COLUMN"),
        ("term", "auto-fixable", "TERM_NAME_LENGTH"),
        ("relation", "warning", "RELATION_ATTRIBUTE_COLUMN"),
    ]
    assert issues[2]["metadata"] == {"actionType": "DELETE_TERM"}
    assert result.data["summary"] == {
        "totalIssues": 4,
        "errorCount": 2,
        "autoFixableCount": 1,
        "warningCount": 1,
        "infoCount": 0,
        "termFailedCount": 2,
        "relationUnmatchedCount": 2,
    }
    assert result.data["files"] == {"term": "term.json", "table": "table.json"}


@pytest.mark.asyncio
async def test_term_branch_failure():
    client = CannedStepClient(
        {
            StepOperation.TERM_VALIDATE_ALL: StepResponse(500, {"success": False, "error": "disk"}),
            StepOperation.RELATION_VALIDATE: _ok(RELATION_DATA),
        }
    )

    result = await build_validation_report(client, ValidationReportRequest())

    assert result.status == 500
    assert result.error.message == TERM_FETCH_FAILED
    assert result.error.details == {"upstreamError": "disk"}


@pytest.mark.asyncio
async def test_relation_branch_failure_keeps_status():
    client = CannedStepClient(
        {
            StepOperation.TERM_VALIDATE_ALL: _ok(TERM_DATA),
            StepOperation.RELATION_VALIDATE: StepResponse(400, {"success": False, "error": "bad file"}),
        }
    )

    result = await build_validation_report(client, ValidationReportRequest())

    assert result.status == 400
    assert result.error.message == RELATION_FETCH_FAILED


@pytest.mark.asyncio
async def test_in_process_report(store, seed, standard_catalogs):
    seed(CatalogType.TERM, [term("사용자", "USER")])
    seed(CatalogType.COLUMN, [record(schemaName="S", tableEnglishName="TB_NONE", columnEnglishName="X")])
    client = InProcessStepClient(OperationContext(store=store))

    result = await build_validation_report(client, ValidationReportRequest())

    summary = result.data["summary"]
    assert summary["termFailedCount"] == 1
    assert summary["relationUnmatchedCount"] == 1
    assert summary["autoFixableCount"] == 1
    assert summary["errorCount"] == 1


class RaisingStepClient(CannedStepClient):
    def __init__(self, raises: StepOperation, responses: dict[StepOperation, StepResponse]):
        super().__init__(responses)
        self.raises = raises

    async def call(self, operation: StepOperation, payload: dict[str, Any]) -> StepResponse:
        self.calls.append(operation)
        if operation is self.raises:
            raise ConnectionError("connection refused")
        return self.responses[operation]


@pytest.mark.asyncio
async def test_relation_call_raising_fails_report():
    client = RaisingStepClient(StepOperation.RELATION_VALIDATE, {StepOperation.TERM_VALIDATE_ALL: _ok(TERM_DATA)})

    result = await build_validation_report(client, ValidationReportRequest())

    assert not result.success
    assert result.status == 500
    assert result.error.message == RELATION_FETCH_FAILED
    assert result.error.details["upstreamError"] == "connection refused"
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_term_call_raising_fails_report():
    client = RaisingStepClient(StepOperation.TERM_VALIDATE_ALL, {StepOperation.RELATION_VALIDATE: _ok(RELATION_DATA)})

    result = await build_validation_report(client, ValidationReportRequest())

    assert result.status == 500
    assert result.error.code == "INTERNAL"
    assert result.error.message == TERM_FETCH_FAILED
