"""
Unified validation report.

Fetches term validation and design-relation validation concurrently and
merges both into one sorted issue list with per-level counts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from metacat.core.logging import get_logger
from metacat.ops.requests import ValidationReportRequest
from metacat.ops.result import OperationResult, start_timer
from metacat.orchestration.steps import StepClient, StepOperation, StepResponse
from metacat.rules.terms import TERM_ERROR_PRIORITY

logger = get_logger(__name__)

LEVEL_ORDER = {"error": 1, "auto-fixable": 2, "warning": 3, "info": 4}
RELATION_PRIORITY = {"error": 100, "warning": 200}
UNKNOWN_PRIORITY = 999

TERM_FETCH_FAILED = "용어 검증 결과를 가져오지 못했습니다."
RELATION_FETCH_FAILED = "관계 검증 결과를 가져오지 못했습니다."


@dataclass(frozen=True, slots=True)
class UnifiedValidationIssue:
    source: str
    level: str
    code: str
    message: str
    entry_id: str
    label: str
    priority: int
    field: str | None = None
    metadata: dict[str, Any] | None = None

    @property
    def sort_key(self) -> tuple[int, int, str]:
        return (LEVEL_ORDER.get(self.level, len(LEVEL_ORDER) + 1), self.priority, self.code)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "source": self.source,
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "entryId": self.entry_id,
            "label": self.label,
            "priority": self.priority,
        }
        if self.field:
            d["field"] = self.field
        if self.metadata is not None:
            d["metadata"] = self.metadata
        return d


def term_issues(failed_entries: list[dict[str, Any]]) -> list[UnifiedValidationIssue]:
    issues: list[UnifiedValidationIssue] = []
    for result in failed_entries:
        entry = result.get("entry") or {}
        suggestion = result.get("suggestions")
        auto_fixable = bool(suggestion and suggestion.get("actionType"))
        label = entry.get("termName") or entry.get("columnName") or entry.get("id") or ""
        for error in result.get("errors", []):
            error_type = error.get("type", "")
            issues.append(
                UnifiedValidationIssue(
                    source="term",
                    level="auto-fixable" if auto_fixable else (error.get("level") or "error"),
                    code=error.get("code") or error_type,
                    message=error.get("message", ""),
                    entry_id=str(entry.get("id", "")),
                    label=label,
                    field=error.get("field"),
                    priority=error.get("priority") or TERM_ERROR_PRIORITY.get(error_type, UNKNOWN_PRIORITY),
                    metadata={"actionType": suggestion.get("actionType")} if suggestion else None,
                )
            )
    return issues


def relation_issues(validation: dict[str, Any]) -> list[UnifiedValidationIssue]:
    issues: list[UnifiedValidationIssue] = []
    for summary in validation.get("summaries", []):
        for issue in summary.get("issues", []):
            severity = issue.get("severity", "error")
            issues.append(
                UnifiedValidationIssue(
                    source="relation",
                    level=severity,
                    code=f"RELATION_{issue.get('relationId')}",
                    message=issue.get("reason", ""),
                    entry_id=issue.get("targetId", ""),
                    label=issue.get("targetLabel", ""),
                    priority=RELATION_PRIORITY.get(severity, RELATION_PRIORITY["warning"]),
                    metadata={
                        "relationId": issue.get("relationId"),
                        "expectedKey": issue.get("expectedKey"),
                        "sourceType": issue.get("sourceType"),
                        "targetType": issue.get("targetType"),
                    },
                )
            )
    return issues


def summarize(
    issues: list[UnifiedValidationIssue],
    *,
    term_failed: int,
    relation_unmatched: int,
) -> dict[str, int]:
    counts = {level: 0 for level in LEVEL_ORDER}
    for issue in issues:
        if issue.level in counts:
            counts[issue.level] += 1
    return {
        "totalIssues": len(issues),
        "errorCount": counts["error"],
        "autoFixableCount": counts["auto-fixable"],
        "warningCount": counts["warning"],
        "infoCount": counts["info"],
        "termFailedCount": term_failed,
        "relationUnmatchedCount": relation_unmatched,
    }


def _fetch_failed(response: StepResponse, message: str, *, elapsed_ms: float) -> OperationResult[Any]:
    return OperationResult.fail(
        "INTERNAL" if response.status >= 500 else "VALIDATION_FAILED",
        message,
        details={"upstreamError": response.error} if response.error else None,
        status=response.status if response.status >= 400 else 500,
        elapsed_ms=elapsed_ms,
    )


def _settle(outcome: StepResponse | BaseException, branch: str) -> StepResponse:
    if isinstance(outcome, StepResponse):
        return outcome
    if isinstance(outcome, asyncio.CancelledError):
        raise outcome
    logger.error("report_branch_raised", branch=branch, error=str(outcome), exc_info=outcome)
    return StepResponse(status=500, body={"success": False, "error": str(outcome) or type(outcome).__name__})


async def build_validation_report(
    client: StepClient,
    request: ValidationReportRequest,
) -> OperationResult[dict[str, Any]]:
    """Term and relation validation merged into one report.

    Both branches are fetched with :func:`asyncio.gather`; a failing
    branch fails the whole report with that branch's status. A branch
    whose call raises counts as a 500 failure of that branch.
    """
    timer = start_timer()
    term_file = request.term_file or "term.json"
    relation_payload = {
        f"{name}File": value for name, value in request.files.as_dict().items() if value
    }

    term_outcome, relation_outcome = await asyncio.gather(
        client.call(StepOperation.TERM_VALIDATE_ALL, {"filename": term_file}),
        client.call(StepOperation.RELATION_VALIDATE, relation_payload),
        return_exceptions=True,
    )
    term_response = _settle(term_outcome, "term")
    relation_response = _settle(relation_outcome, "relation")

    if not term_response.ok:
        logger.warning("report_term_branch_failed", status=term_response.status, error=term_response.error)
        return _fetch_failed(term_response, TERM_FETCH_FAILED, elapsed_ms=timer.elapsed_ms)
    if not relation_response.ok:
        logger.warning("report_relation_branch_failed", status=relation_response.status, error=relation_response.error)
        return _fetch_failed(relation_response, RELATION_FETCH_FAILED, elapsed_ms=timer.elapsed_ms)

    term_data = term_response.data or {}
    relation_data = relation_response.data or {}
    validation = relation_data.get("validation") or {}
    totals = validation.get("totals") or {}

    issues = relation_issues(validation) + term_issues(term_data.get("failedEntries") or [])
    issues.sort(key=lambda i: i.sort_key)
    summary = summarize(
        issues,
        term_failed=term_data.get("failedCount", 0),
        relation_unmatched=totals.get("unmatched", 0),
    )

    logger.info("validation_report_built", term_file=term_file, **summary)
    return OperationResult.ok(
        {
            "files": {"term": term_file, **(relation_data.get("files") or {})},
            "summary": summary,
            "sections": {
                "term": {
                    "totalCount": term_data.get("totalCount", 0),
                    "passedCount": term_data.get("passedCount", 0),
                    "failedCount": term_data.get("failedCount", 0),
                },
                "relation": totals,
            },
            "issues": [i.to_dict() for i in issues],
        },
        elapsed_ms=timer.elapsed_ms,
        message="통합 진단 리포트 생성 완료",
    )
