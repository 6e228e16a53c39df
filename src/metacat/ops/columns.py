"""
Column operations.

Term → column sync (derive Korean name, domain and data type of each
column from its term and that term's domain) and XLSX column-definition
import/export.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType, get_spec, now_iso
from metacat.core.storage import validate_filename
from metacat.core.xlsx import export_column_workbook, parse_column_workbook
from metacat.ops.catalog import merge_prepared, prepare_entries
from metacat.ops.context import OperationContext
from metacat.ops.requests import SyncColumnsRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.sync import plan_column_sync

logger = get_logger(__name__)


def resolve_column_files(ctx: OperationContext, request: SyncColumnsRequest) -> tuple[str, str, str]:
    """``(column, term, domain)`` filenames for a column sync run.

    Each one is the request value, then the column file's stored mapping,
    then (domain only) the term file's mapping, then the default.
    """
    column_file = validate_filename(request.column_filename or "column.json")
    stored = ctx.store.load(CatalogType.COLUMN, column_file).get("mapping") or {}

    term_file = ctx.store.resolve_related(CatalogType.COLUMN, column_file, CatalogType.TERM, request.term_filename)

    if request.domain_filename and request.domain_filename.strip():
        domain_file = validate_filename(request.domain_filename)
    elif isinstance(stored.get("domain"), str) and stored["domain"].strip():
        domain_file = stored["domain"]
    else:
        domain_file = ctx.store.resolve_related(CatalogType.TERM, term_file, CatalogType.DOMAIN)

    return column_file, term_file, domain_file


def sync_column_terms(ctx: OperationContext, request: SyncColumnsRequest) -> OperationResult[dict[str, Any]]:
    """Derive column fields from the term → domain chain; saves once when applying."""
    timer = start_timer()
    apply = request.apply and not ctx.dry_run

    try:
        column_file, term_file, domain_file = resolve_column_files(ctx, request)
        applied = False
        with ctx.store.mutation(CatalogType.COLUMN, column_file):
            payload = ctx.store.load(CatalogType.COLUMN, column_file)
            plan = plan_column_sync(
                payload.get("entries", []),
                ctx.store.load_entries(CatalogType.TERM, term_file),
                ctx.store.load_entries(CatalogType.DOMAIN, domain_file),
                now=now_iso(),
            )
            if apply and plan.updated > 0:
                ctx.store.save(CatalogType.COLUMN, {**payload, "entries": plan.entries}, column_file)
                applied = True

        logger.info(
            "columns_synced",
            column=column_file,
            term=term_file,
            domain=domain_file,
            matched=plan.matched,
            updated=plan.updated,
            applied=applied,
        )
        return OperationResult.ok(
            {
                "columnFilename": column_file,
                "termFilename": term_file,
                "domainFilename": domain_file,
                "mode": "apply" if request.apply else "preview",
                "applied": applied,
                **plan.summary(),
            },
            elapsed_ms=timer.elapsed_ms,
            message=f"컬럼-용어 동기화 완료: 업데이트 {plan.updated}건",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "컬럼-용어 동기화 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def column_sync_status(ctx: OperationContext, request: SyncColumnsRequest) -> OperationResult[dict[str, Any]]:
    """Same computation as :func:`sync_column_terms`, never written."""
    return sync_column_terms(ctx, replace(request, apply=False))


# ------------------------------------------------------------------ #
# XLSX
# ------------------------------------------------------------------ #


def import_column_workbook(
    ctx: OperationContext,
    content: bytes,
    *,
    filename: str | None = None,
    replace_entries: bool = False,
) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    if not content:
        return OperationResult.fail("VALIDATION_FAILED", "업로드된 파일이 없습니다.", elapsed_ms=timer.elapsed_ms)

    try:
        spec = get_spec(CatalogType.COLUMN)
        parsed = parse_column_workbook(content)
        entries, skipped = prepare_entries(ctx, spec, parsed, filename)
        if not entries:
            return OperationResult.fail(
                "VALIDATION_FAILED",
                "유효한 컬럼 정의서 데이터를 찾을 수 없습니다.",
                details={"skipped": skipped},
                elapsed_ms=timer.elapsed_ms,
            )
        result = merge_prepared(ctx, spec, entries, skipped, filename=filename, replace=replace_entries)
        result.elapsed_ms = timer.elapsed_ms
        return result
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "컬럼 정의서 업로드 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def export_columns(ctx: OperationContext, filename: str | None = None) -> OperationResult[bytes]:
    timer = start_timer()

    try:
        entries = ctx.store.load_entries(CatalogType.COLUMN, filename)
        content = export_column_workbook(entries)
        logger.info("columns_exported", filename=filename or "column.json", count=len(entries))
        return OperationResult.ok(content, elapsed_ms=timer.elapsed_ms, metadata={"count": len(entries)})
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "컬럼 정의서 다운로드 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )
