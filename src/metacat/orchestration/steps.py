"""
Step invocation for the sync pipeline and the validation report.

Pipeline stages call one another as black boxes through a
:class:`StepClient`: an operation name plus a camelCase payload in, a
:class:`StepResponse` (HTTP-like status plus ``{success, data, error}``
body) out. :class:`InProcessStepClient` dispatches to the ops functions
on worker threads; tests inject fakes to observe or break stages.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from metacat.core.logging import get_logger
from metacat.ops.columns import sync_column_terms
from metacat.ops.context import OperationContext
from metacat.ops.relations import sync_relations, validate_design_relations
from metacat.ops.requests import (
    RelationFilesRequest,
    SyncColumnsRequest,
    SyncRelationsRequest,
    SyncTermsRequest,
    SyncVocabularyDomainRequest,
    ValidationReportRequest,
)
from metacat.ops.result import OperationResult
from metacat.ops.terms import sync_terms, validate_all_terms
from metacat.ops.vocabulary import sync_vocabulary_domain

logger = get_logger(__name__)


class StepOperation(str, Enum):
    """Operations reachable through a step client."""

    VOCABULARY_SYNC = "vocabulary.sync-domain"
    TERM_SYNC = "term.sync"
    RELATION_SYNC = "erd.relations.sync"
    COLUMN_SYNC = "column.sync-term"
    VALIDATION_REPORT = "validation.report"
    TERM_VALIDATE_ALL = "term.validate-all"
    RELATION_VALIDATE = "erd.relations"


@dataclass(frozen=True, slots=True)
class StepResponse:
    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 400 and self.body.get("success") is True

    @property
    def data(self) -> Any:
        return self.body.get("data")

    @property
    def error(self) -> str | None:
        return self.body.get("error")

    @classmethod
    def from_result(cls, result: OperationResult[Any]) -> StepResponse:
        body: dict[str, Any] = {"success": result.success, "data": result.data}
        if result.message:
            body["message"] = result.message
        if result.error is not None:
            body["error"] = result.error.message
            body["data"] = result.error.details.get("data")
        return cls(status=result.status, body=body)


@runtime_checkable
class StepClient(Protocol):
    """Anything that can run a named step and report an HTTP-like outcome."""

    async def call(self, operation: StepOperation, payload: dict[str, Any]) -> StepResponse: ...


# ── Payload → request ────────────────────────────────────────────────────


def _text(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) and value.strip() else None


def relation_files(payload: dict[str, Any]) -> RelationFilesRequest:
    return RelationFilesRequest(
        database_file=_text(payload, "databaseFile"),
        entity_file=_text(payload, "entityFile"),
        attribute_file=_text(payload, "attributeFile"),
        table_file=_text(payload, "tableFile"),
        column_file=_text(payload, "columnFile"),
    )


def report_request(payload: dict[str, Any]) -> ValidationReportRequest:
    return ValidationReportRequest(
        term_file=_text(payload, "termFile") or _text(payload, "termFilename"),
        files=relation_files(payload),
    )


def _apply(payload: dict[str, Any], default: bool = True) -> bool:
    value = payload.get("apply")
    return value if isinstance(value, bool) else default


_Handler = Callable[[OperationContext, dict[str, Any]], OperationResult[Any]]

_HANDLERS: dict[StepOperation, _Handler] = {
    StepOperation.VOCABULARY_SYNC: lambda ctx, p: sync_vocabulary_domain(
        ctx,
        SyncVocabularyDomainRequest(
            vocabulary_filename=_text(p, "vocabularyFilename"),
            domain_filename=_text(p, "domainFilename"),
            apply=_apply(p),
        ),
    ),
    StepOperation.TERM_SYNC: lambda ctx, p: sync_terms(
        ctx, SyncTermsRequest(filename=_text(p, "filename"), apply=_apply(p))
    ),
    StepOperation.RELATION_SYNC: lambda ctx, p: sync_relations(
        ctx, SyncRelationsRequest(files=relation_files(p), apply=_apply(p, default=False))
    ),
    StepOperation.COLUMN_SYNC: lambda ctx, p: sync_column_terms(
        ctx,
        SyncColumnsRequest(
            column_filename=_text(p, "columnFilename"),
            term_filename=_text(p, "termFilename"),
            domain_filename=_text(p, "domainFilename"),
            apply=_apply(p),
        ),
    ),
    StepOperation.TERM_VALIDATE_ALL: lambda ctx, p: validate_all_terms(ctx, _text(p, "filename")),
    StepOperation.RELATION_VALIDATE: lambda ctx, p: validate_design_relations(ctx, relation_files(p)),
}


class InProcessStepClient:
    """Runs steps against the ops layer of one :class:`OperationContext`.

    Sync ops run in :func:`asyncio.to_thread`; the report step is awaited
    directly and fans out through this same client.
    """

    def __init__(self, ctx: OperationContext):
        self.ctx = ctx

    async def call(self, operation: StepOperation, payload: dict[str, Any]) -> StepResponse:
        operation = StepOperation(operation)
        logger.debug("step_call", operation=operation.value, request_id=self.ctx.request_id)
        if operation is StepOperation.VALIDATION_REPORT:
            from metacat.orchestration.report import build_validation_report

            result = await build_validation_report(self, report_request(payload))
        else:
            result = await asyncio.to_thread(_HANDLERS[operation], self.ctx, payload)
        return StepResponse.from_result(result)
