"""
Design-relation operations.

Checks the references between the database, entity, attribute, table and
column definition catalogs and corrects unambiguous mismatches.
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType, now_iso
from metacat.core.storage import validate_filename
from metacat.ops.context import OperationContext
from metacat.ops.requests import RelationFilesRequest, SyncRelationsRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.relations import DesignContext, apply_updates, build_relation_sync_plan, validate_relations

logger = get_logger(__name__)

CHANGE_LIMIT = 200
SUGGESTION_LIMIT = 100

# context attribute per design type
_CONTEXT_FIELDS: dict[CatalogType, str] = {
    CatalogType.DATABASE: "databases",
    CatalogType.ENTITY: "entities",
    CatalogType.ATTRIBUTE: "attributes",
    CatalogType.TABLE: "tables",
    CatalogType.COLUMN: "columns",
}


def resolve_design_files(ctx: OperationContext, files: RelationFilesRequest) -> dict[str, str | None]:
    """Explicit file per type, else the first listed file, else ``None``."""
    resolved: dict[str, str | None] = {}
    for name, explicit in files.as_dict().items():
        if explicit and explicit.strip():
            resolved[name] = validate_filename(explicit)
            continue
        listed = ctx.store.list_files(name)
        resolved[name] = listed[0] if listed else None
    return resolved


def load_design_context(ctx: OperationContext, files: RelationFilesRequest) -> tuple[DesignContext, dict[str, str | None]]:
    resolved = resolve_design_files(ctx, files)
    context = DesignContext()
    for catalog, attr in _CONTEXT_FIELDS.items():
        filename = resolved[catalog.value]
        if filename is not None:
            setattr(context, attr, ctx.store.load_entries(catalog, filename))
    return context, resolved


def validate_design_relations(
    ctx: OperationContext,
    files: RelationFilesRequest,
) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    try:
        context, resolved = load_design_context(ctx, files)
        validation = validate_relations(context)
        totals = validation["totals"]
        logger.info(
            "relations_validated",
            checked=totals["totalChecked"],
            unmatched=totals["unmatched"],
            errors=totals["errorCount"],
        )
        return OperationResult.ok({"files": resolved, "validation": validation}, elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "관계 검증 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def sync_relations(ctx: OperationContext, request: SyncRelationsRequest) -> OperationResult[dict[str, Any]]:
    """Plan (and with ``apply``, write) table and column relation fixes.

    Tables are corrected first; column fixes are planned against the
    corrected tables. Each touched file is saved once.
    """
    timer = start_timer()
    apply = request.apply and not ctx.dry_run

    try:
        context, resolved = load_design_context(ctx, request.files)
        before = validate_relations(context)
        plan = build_relation_sync_plan(context)
        counts: dict[str, int] = dict(plan.counts)

        table_changed = column_changed = 0
        if apply:
            now = now_iso()
            if resolved["table"] and plan.table_updates:
                tables, table_changed = apply_updates(context.tables, plan.table_updates, now)
                if table_changed:
                    _save_entries(ctx, CatalogType.TABLE, resolved["table"], tables)
                context.tables = tables
            if resolved["column"] and plan.column_updates:
                columns, column_changed = apply_updates(context.columns, plan.column_updates, now)
                if column_changed:
                    _save_entries(ctx, CatalogType.COLUMN, resolved["column"], columns)
                context.columns = columns
        counts.update(
            appliedTableUpdates=table_changed,
            appliedColumnUpdates=column_changed,
            appliedTotalUpdates=table_changed + column_changed,
        )
        after = validate_relations(context)

        logger.info("relations_synced", applied=apply, **counts)
        return OperationResult.ok(
            {
                "mode": "apply" if request.apply else "preview",
                "files": resolved,
                "counts": counts,
                "changes": plan.changes[:CHANGE_LIMIT],
                "suggestions": plan.suggestions[:SUGGESTION_LIMIT],
                "validationBefore": before,
                "validationAfter": after,
            },
            elapsed_ms=timer.elapsed_ms,
            message=f"관계 동기화 후보 {counts['totalCandidates']}건",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "관계 동기화 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def _save_entries(ctx: OperationContext, catalog: CatalogType, filename: str, entries: list[dict[str, Any]]) -> None:
    with ctx.store.mutation(catalog, filename):
        payload = ctx.store.load(catalog, filename)
        ctx.store.save(catalog, {**payload, "entries": entries}, filename)
