"""
Term generator operations.

Both operations read the words of one vocabulary file (default
``vocabulary.json``); the store cache keeps repeated calls cheap.
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType
from metacat.ops.context import OperationContext
from metacat.ops.requests import GenerateTermRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.generator import DIRECTIONS, convert_term, segment_term, segment_words, word_lookup

logger = get_logger(__name__)


def _invalid(request: GenerateTermRequest, missing: str) -> str | None:
    if not request.term.strip():
        return missing
    if request.direction not in DIRECTIONS:
        return f"지원하지 않는 변환 방향입니다: {request.direction} (허용: {', '.join(DIRECTIONS)})"
    return None


def generate_term_name(ctx: OperationContext, request: GenerateTermRequest) -> OperationResult[dict[str, Any]]:
    """Convert ``사용자_이름`` to ``USER_NAME`` (or back); unknown parts become ``##``."""
    timer = start_timer()
    invalid = _invalid(request, "변환할 용어를 제공해야 합니다.")
    if invalid:
        return OperationResult.fail("VALIDATION_FAILED", invalid, elapsed_ms=timer.elapsed_ms)

    try:
        vocabulary = ctx.store.load_entries(CatalogType.VOCABULARY, request.filename)
        result = convert_term(request.term.strip(), word_lookup(vocabulary, request.direction))
        return OperationResult.ok(
            {"term": request.term, "direction": request.direction, "result": result},
            elapsed_ms=timer.elapsed_ms,
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "서버에서 용어 변환 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def segment_term_name(ctx: OperationContext, request: GenerateTermRequest) -> OperationResult[dict[str, Any]]:
    """Split unspaced words into vocabulary words; every combination is returned."""
    timer = start_timer()
    invalid = _invalid(request, "분석할 단어를 제공해야 합니다.")
    if invalid:
        return OperationResult.fail("VALIDATION_FAILED", invalid, elapsed_ms=timer.elapsed_ms)

    try:
        vocabulary = ctx.store.load_entries(CatalogType.VOCABULARY, request.filename)
        segments = segment_term(request.term, segment_words(vocabulary, request.direction))
        return OperationResult.ok(
            {"term": request.term, "direction": request.direction, "segments": segments},
            elapsed_ms=timer.elapsed_ms,
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "서버에서 분석 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)
