"""
History operations.

Read, append and clear the per-catalog change log (``history.json``).
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.history import HistoryLog
from metacat.core.logging import get_logger
from metacat.core.models import get_spec
from metacat.ops.context import OperationContext
from metacat.ops.result import OperationResult, fail_from, start_timer

logger = get_logger(__name__)


def get_history(
    ctx: OperationContext,
    catalog: str,
    *,
    filename: str | None = None,
    limit: int | None = None,
) -> OperationResult[dict[str, Any]]:
    """History logs, newest first, optionally limited to one file."""
    timer = start_timer()

    if limit is not None and limit < 1:
        return OperationResult.fail("VALIDATION_FAILED", "limit은 1 이상이어야 합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        data = ctx.history.load(spec.type, filename)
        if limit is not None:
            data["logs"] = data["logs"][:limit]
        return OperationResult.ok(data, elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "히스토리 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def add_history(ctx: OperationContext, catalog: str, body: dict[str, Any]) -> OperationResult[dict[str, Any]]:
    """Append one log supplied by a client (``action``, ``targetId``, ``targetName``, …)."""
    timer = start_timer()

    action = body.get("action")
    target_id = body.get("targetId")
    target_name = body.get("targetName")
    if not action or not target_id or not target_name:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "action, targetId, targetName은 필수 항목입니다.",
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        spec = get_spec(catalog)
        log = HistoryLog(
            action=str(action),
            target_id=str(target_id),
            target_name=str(target_name),
            filename=body.get("filename"),
            details=body.get("details"),
        )
        ctx.history.add(spec.type, log)
        return OperationResult.ok(log.to_record(), elapsed_ms=timer.elapsed_ms, message="히스토리가 기록되었습니다.")
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "히스토리 기록 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def clear_history(ctx: OperationContext, catalog: str) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    try:
        spec = get_spec(catalog)
        backup = ctx.history.clear(spec.type)
        return OperationResult.ok(
            {"backupFile": backup},
            elapsed_ms=timer.elapsed_ms,
            message="히스토리가 초기화되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "히스토리 초기화 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)
