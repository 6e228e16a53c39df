"""
Alignment pipeline.

Runs the synchronizers in dependency order and finishes with the unified
validation report::

    vocabulary → term → relation → column → validation

Each stage goes through a :class:`~metacat.orchestration.steps.StepClient`.
The run stops at the first stage that fails; stages already applied stay
applied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from metacat.core.logging import LogContext, get_logger
from metacat.ops.requests import AlignmentRequest
from metacat.ops.result import ERROR_CODE_TO_STATUS, OperationResult, start_timer
from metacat.orchestration.steps import StepClient, StepOperation, StepResponse

logger = get_logger(__name__)

FALSY_FLAGS = frozenset({"false", "0", "no"})


def parse_apply_flag(query_value: str | None, body_value: Any = None, *, default: bool = True) -> bool:
    """``apply`` from a query string, else a boolean body value, else *default*."""
    if query_value is not None:
        return query_value.strip().lower() not in FALSY_FLAGS
    if isinstance(body_value, bool):
        return body_value
    return default


@dataclass(frozen=True, slots=True)
class AlignmentStep:
    name: str
    operation: StepOperation
    payload: Callable[[AlignmentRequest], dict[str, Any]]
    failure_message: str


def _relation_files(request: AlignmentRequest) -> dict[str, Any]:
    return {f"{name}File": value for name, value in request.files.as_dict().items() if value}


ALIGNMENT_STEPS: tuple[AlignmentStep, ...] = (
    AlignmentStep(
        "vocabulary",
        StepOperation.VOCABULARY_SYNC,
        lambda r: {
            "apply": r.apply,
            "vocabularyFilename": r.vocabulary_filename,
            "domainFilename": r.domain_filename,
        },
        "단어집-도메인 동기화 실행 중 오류가 발생했습니다.",
    ),
    AlignmentStep(
        "term",
        StepOperation.TERM_SYNC,
        lambda r: {"apply": r.apply, "filename": r.term_filename},
        "용어 동기화 실행 중 오류가 발생했습니다.",
    ),
    AlignmentStep(
        "relation",
        StepOperation.RELATION_SYNC,
        lambda r: {"apply": r.apply, **_relation_files(r)},
        "관계 동기화 실행 중 오류가 발생했습니다.",
    ),
    AlignmentStep(
        "column",
        StepOperation.COLUMN_SYNC,
        lambda r: {
            "apply": r.apply,
            "columnFilename": r.column_filename,
            "termFilename": r.term_filename,
            "domainFilename": r.domain_filename,
        },
        "컬럼-용어 동기화 실행 중 오류가 발생했습니다.",
    ),
    AlignmentStep(
        "validation",
        StepOperation.VALIDATION_REPORT,
        lambda r: {"termFilename": r.term_filename, **_relation_files(r)},
        "통합 진단 리포트 조회 중 오류가 발생했습니다.",
    ),
)


def _code_for_status(status: int) -> str:
    for code, mapped in ERROR_CODE_TO_STATUS.items():
        if mapped == status:
            return code
    return "INTERNAL"


def _summary(data: dict[str, Any]) -> dict[str, int]:
    relation = data.get("relation") or {}
    report = (data.get("validation") or {}).get("summary") or {}
    return {
        "appliedVocabularyUpdates": (data.get("vocabulary") or {}).get("updated", 0),
        "appliedTermUpdates": (data.get("term") or {}).get("updated", 0),
        "appliedRelationUpdates": (relation.get("counts") or {}).get("appliedTotalUpdates", 0),
        "appliedColumnUpdates": (data.get("column") or {}).get("updated", 0),
        "remainingTermFailed": report.get("termFailedCount", 0),
        "relationUnmatchedCount": report.get("relationUnmatchedCount", 0),
        "totalIssues": report.get("totalIssues", 0),
    }


async def run_alignment(client: StepClient, request: AlignmentRequest) -> OperationResult[dict[str, Any]]:
    """Run every stage in order; the first failure ends the run with ``failedStep``."""
    timer = start_timer()
    collected: dict[str, Any] = {}

    for step in ALIGNMENT_STEPS:
        try:
            async with LogContext(step=step.name):
                response = await client.call(step.operation, step.payload(request))
        except Exception as exc:
            logger.exception("alignment_step_raised", step=step.name, error=str(exc))
            response = StepResponse(status=500, body={"success": False, "error": step.failure_message})

        if not response.ok:
            status = response.status if response.status >= 400 else 500
            logger.warning("alignment_step_failed", step=step.name, status=status, error=response.error)
            return OperationResult.fail(
                _code_for_status(status),
                response.error or step.failure_message,
                details={"data": {"failedStep": step.name}},
                status=status,
                elapsed_ms=timer.elapsed_ms,
            )

        collected[step.name] = response.data
        logger.info("alignment_step_done", step=step.name, apply=request.apply)

    return OperationResult.ok(
        {
            "mode": "apply" if request.apply else "preview",
            "applied": request.apply,
            "steps": {name: {"data": data} for name, data in collected.items()},
            "summary": _summary(collected),
        },
        elapsed_ms=timer.elapsed_ms,
        message="통합 정합화가 완료되었습니다." if request.apply else "통합 정합화 미리보기 결과입니다.",
    )
