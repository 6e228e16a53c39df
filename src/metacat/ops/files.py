"""
Catalog file operations.

List, create, rename and delete the named JSON files of a catalog type,
and read or replace a file's cross-catalog ``mapping``.
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import get_spec
from metacat.ops.context import OperationContext
from metacat.ops.result import OperationResult, fail_from, start_timer

logger = get_logger(__name__)


def list_files(ctx: OperationContext, catalog: str) -> OperationResult[list[str]]:
    timer = start_timer()

    try:
        spec = get_spec(catalog)
        files = ctx.store.list_files(spec.type)
        if spec.default_filename not in files:
            # first access creates the default file
            ctx.store.load(spec.type)
            files = ctx.store.list_files(spec.type)
        return OperationResult.ok(files, elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "파일 목록 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def create_file(ctx: OperationContext, catalog: str, filename: str) -> OperationResult[dict[str, str]]:
    timer = start_timer()

    if not (filename or "").strip():
        return OperationResult.fail("VALIDATION_FAILED", "파일명이 필요합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        if ctx.dry_run:
            return OperationResult.ok({"filename": filename}, elapsed_ms=timer.elapsed_ms, metadata={"dry_run": True})
        name = ctx.store.create_file(spec.type, filename)
        return OperationResult.ok(
            {"filename": name},
            elapsed_ms=timer.elapsed_ms,
            message="파일이 생성되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "파일 생성 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def rename_file(
    ctx: OperationContext,
    catalog: str,
    old_filename: str,
    new_filename: str,
) -> OperationResult[dict[str, str]]:
    timer = start_timer()

    if not (old_filename or "").strip() or not (new_filename or "").strip():
        return OperationResult.fail(
            "VALIDATION_FAILED", "기존 파일명과 새 파일명이 필요합니다.", elapsed_ms=timer.elapsed_ms
        )

    try:
        spec = get_spec(catalog)
        name = ctx.store.rename_file(spec.type, old_filename, new_filename)
        return OperationResult.ok(
            {"oldFilename": old_filename, "newFilename": name},
            elapsed_ms=timer.elapsed_ms,
            message="파일 이름이 변경되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "파일 이름 변경 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def delete_file(ctx: OperationContext, catalog: str, filename: str) -> OperationResult[dict[str, str]]:
    timer = start_timer()

    if not (filename or "").strip():
        return OperationResult.fail("VALIDATION_FAILED", "파일명이 필요합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        ctx.store.delete_file(spec.type, filename)
        return OperationResult.ok(
            {"filename": filename},
            elapsed_ms=timer.elapsed_ms,
            message="파일이 삭제되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "파일 삭제 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Mapping
# ------------------------------------------------------------------ #


def get_mapping(
    ctx: OperationContext,
    catalog: str,
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    try:
        spec = get_spec(catalog)
        mapping = ctx.store.get_mapping(spec.type, filename)
        return OperationResult.ok(
            {"filename": filename or spec.default_filename, "mapping": mapping},
            elapsed_ms=timer.elapsed_ms,
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "매핑 정보 조회 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def set_mapping(
    ctx: OperationContext,
    catalog: str,
    mapping: dict[str, str],
    *,
    filename: str | None = None,
) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    if not isinstance(mapping, dict):
        return OperationResult.fail("VALIDATION_FAILED", "mapping 객체가 필요합니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(catalog)
        resolved = ctx.store.set_mapping(spec.type, mapping, filename)
        logger.info("mapping_updated", catalog=spec.type.value, filename=filename, mapping=resolved)
        return OperationResult.ok(
            {"filename": filename or spec.default_filename, "mapping": resolved},
            elapsed_ms=timer.elapsed_ms,
            message="매핑 정보가 저장되었습니다.",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "매핑 정보 저장 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)
