"""
Domain operations: single-draft validation and whole-file validation.
"""

from __future__ import annotations

from typing import Any

from metacat.core.errors import MetacatError
from metacat.core.logging import get_logger
from metacat.core.models import CatalogType
from metacat.ops.context import OperationContext
from metacat.ops.requests import ValidateDomainRequest
from metacat.ops.result import OperationResult, fail_from, start_timer
from metacat.rules.domains import DOMAIN_NAME_DUPLICATE, check_domain_draft, validate_domains

logger = get_logger(__name__)


def validate_domain_entry(ctx: OperationContext, request: ValidateDomainRequest) -> OperationResult[dict[str, Any]]:
    """Validate a domain before it is saved.

    The generated standardDomainName must be unique across every domain
    file (409); missing category or type is a 400.
    """
    timer = start_timer()

    draft: dict[str, Any] = {
        "domainCategory": request.domain_category,
        "physicalDataType": request.physical_data_type,
        "dataLength": request.data_length,
        "decimalPlaces": request.decimal_places,
    }
    if request.entry_id:
        draft["id"] = request.entry_id

    try:
        peers = [e for _, e in ctx.store.load_all(CatalogType.DOMAIN)]
        name, issues = check_domain_draft(draft, peers)
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail("INTERNAL", "Validation 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms)

    if issues:
        first = issues[0]
        conflict = first.type == DOMAIN_NAME_DUPLICATE
        return OperationResult.fail(
            "CONFLICT" if conflict else "VALIDATION_FAILED",
            first.message,
            details={"data": {"generatedDomainName": name, "errors": [i.to_dict() for i in issues]}},
            status=409 if conflict else 400,
            elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok(
        {"valid": True, "generatedDomainName": name},
        elapsed_ms=timer.elapsed_ms,
        message="Validation passed",
    )


def validate_all_domains(ctx: OperationContext, filename: str | None = None) -> OperationResult[dict[str, Any]]:
    timer = start_timer()

    try:
        entries = ctx.store.load_entries(CatalogType.DOMAIN, filename)
        result = validate_domains(entries)
        logger.info(
            "domains_validated",
            filename=filename or "domain.json",
            total=result["totalCount"],
            failed=result["failedCount"],
        )
        return OperationResult.ok(result, elapsed_ms=timer.elapsed_ms, message="Domain validation completed")
    except MetacatError as exc:
        return fail_from(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL", "도메인 유효성 검사 중 오류가 발생했습니다.", elapsed_ms=timer.elapsed_ms
        )
