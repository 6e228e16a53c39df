"""
Term operations.

Single-entry validation (create/edit mode), whole-file validation with
auto-fix suggestions, mapping-flag sync and domain recommendation. The vocabulary and domain
files a term file validates against come from its ``mapping`` (defaults
``vocabulary.json`` / ``domain.json``).
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType, now_iso
from metacat.ops.context import OperationContext
from metacat.ops.requests import RecommendDomainRequest, SyncTermsRequest, ValidateTermRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.autofix import suggest_fix
from metacat.rules.generator import recommend_domains
from metacat.rules.sync import plan_term_sync
from metacat.rules.terms import TermCatalogs, status_for_errors, validate_all, validate_term

logger = get_logger(__name__)


def load_term_catalogs(ctx: OperationContext, filename: str | None) -> TermCatalogs:
    """Vocabulary and domain snapshots mapped to a term file."""
    vocabulary_file = ctx.store.resolve_related(CatalogType.TERM, filename, CatalogType.VOCABULARY)
    domain_file = ctx.store.resolve_related(CatalogType.TERM, filename, CatalogType.DOMAIN)
    return TermCatalogs(
        vocabulary=ctx.store.load_entries(CatalogType.VOCABULARY, vocabulary_file),
        domains=ctx.store.load_entries(CatalogType.DOMAIN, domain_file),
        vocabulary_filename=vocabulary_file,
        domain_filename=domain_file,
    )


def validate_term_entry(ctx: OperationContext, request: ValidateTermRequest) -> OperationResult[dict[str, Any]]:
    """Validate one term before it is saved.

    Without ``entry_id`` (create mode) duplicates are checked across every
    term file; with it (edit mode) the duplicate rules are skipped. The
    highest-priority error decides the message and status (409 for
    duplicates, 400 otherwise).
    """
    timer = start_timer()

    if not request.term_name.strip():
        return OperationResult.fail("VALIDATION_FAILED", "용어명이 필요합니다.", elapsed_ms=timer.elapsed_ms)
    if not request.column_name.strip():
        return OperationResult.fail("VALIDATION_FAILED", "컬럼명이 필요합니다.", elapsed_ms=timer.elapsed_ms)

    entry: dict[str, Any] = {
        "termName": request.term_name.strip(),
        "columnName": request.column_name.strip(),
        "domainName": request.domain_name.strip(),
    }
    editing = bool(request.entry_id)
    if editing:
        entry["id"] = request.entry_id

    try:
        catalogs = load_term_catalogs(ctx, request.filename)
        peers = [] if editing else [e for _, e in ctx.store.load_all(CatalogType.TERM)]
        errors = validate_term(entry, catalogs, peers=peers, check_duplicates=not editing)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "Validation 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)

    if errors:
        status = status_for_errors(errors)
        data: dict[str, Any] = {"errors": [e.to_dict() for e in errors], "errorCount": len(errors)}
        suggestion = suggest_fix(entry, errors, catalogs, peers=peers)
        if suggestion is not None:
            data["suggestions"] = suggestion.to_dict()
        logger.debug("term_validation_failed", term=entry["termName"], first=errors[0].type, count=len(errors))
        return OperationResult.fail(
            "CONFLICT" if status == 409 else "VALIDATION_FAILED",
            errors[0].message,
            details={"data": data},
            status=status,
            elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok(
        {"valid": True, "mode": "edit" if editing else "create"},
        elapsed_ms=timer.elapsed_ms,
        message="Validation passed",
    )


def validate_all_terms(ctx: OperationContext, filename: str | None = None) -> OperationResult[dict[str, Any]]:
    """Validate every entry of a term file; duplicates are checked within the file."""
    timer = start_timer()

    try:
        entries = ctx.store.load_entries(CatalogType.TERM, filename)
        catalogs = load_term_catalogs(ctx, filename)
        result = validate_all(entries, catalogs)
        logger.info(
            "terms_validated",
            filename=filename or "term.json",
            total=result["totalCount"],
            failed=result["failedCount"],
        )
        return OperationResult.ok(result, elapsed_ms=timer.elapsed_ms, message="Validation completed")
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "Validation 체크 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )


def sync_terms(ctx: OperationContext, request: SyncTermsRequest) -> OperationResult[dict[str, Any]]:
    """Recompute mapping flags of every term in a file."""
    timer = start_timer()
    filename = request.filename or "term.json"
    apply = request.apply and not ctx.dry_run

    try:
        catalogs = load_term_catalogs(ctx, filename)
        applied = False
        with ctx.store.mutation(CatalogType.TERM, filename):
            payload = ctx.store.load(CatalogType.TERM, filename)
            plan = plan_term_sync(
                payload.get("entries", []),
                catalogs.vocabulary,
                catalogs.domains,
                now=now_iso(),
            )
            if apply and plan.updated > 0:
                ctx.store.save(CatalogType.TERM, {**payload, "entries": plan.entries}, filename)
                applied = True

        logger.info("terms_synced", filename=filename, updated=plan.updated, applied=applied)
        return OperationResult.ok(
            {
                "filename": filename,
                "vocabularyFilename": catalogs.vocabulary_filename,
                "domainFilename": catalogs.domain_filename,
                **plan.summary(),
                "mode": "apply" if request.apply else "preview",
                "applied": applied,
            },
            elapsed_ms=timer.elapsed_ms,
            message=f"용어 매핑 동기화 완료: 업데이트 {plan.updated}건",
        )
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "용어 동기화 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)


def recommend_term_domains(
    ctx: OperationContext,
    request: RecommendDomainRequest,
) -> OperationResult[dict[str, Any]]:
    """Domain names for a term, picked by the domain category of its last word.

    A blank term name yields an empty recommendation rather than an error.
    """
    timer = start_timer()

    try:
        if not request.term_name.strip():
            return OperationResult.ok(recommend_domains("", [], []), elapsed_ms=timer.elapsed_ms)
        catalogs = load_term_catalogs(ctx, request.filename or "term.json")
        result = recommend_domains(request.term_name, catalogs.vocabulary, catalogs.domains)
        return OperationResult.ok(result, elapsed_ms=timer.elapsed_ms)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "용어 도메인 추천 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)
