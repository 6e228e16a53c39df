"""
Report and alignment router.

Endpoints:
    GET  /validation/report   Term + relation validation as one sorted issue list
    POST /alignment/sync      vocabulary → term → relation → column → validation

Both are ``async`` handlers: the report fans out with ``asyncio.gather``
and the alignment pipeline awaits each stage through the step client.
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import Steps
from metacat.api.utils import _respond
from metacat.ops.requests import AlignmentRequest, RelationFilesRequest, ValidationReportRequest
from metacat.orchestration.alignment import parse_apply_flag, run_alignment
from metacat.orchestration.report import build_validation_report

router = APIRouter()


class AlignmentBody(BaseModel):
    apply: bool | None = None
    vocabularyFilename: str | None = None
    domainFilename: str | None = None
    termFilename: str | None = None
    columnFilename: str | None = None
    databaseFile: str | None = None
    entityFile: str | None = None
    attributeFile: str | None = None
    tableFile: str | None = None
    columnFile: str | None = None


def _pick(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value
    return None


@router.get("/validation/report")
async def validation_report(
    steps: Steps,
    termFile: str | None = Query(None),
    termFilename: str | None = Query(None),
    databaseFile: str | None = Query(None),
    entityFile: str | None = Query(None),
    attributeFile: str | None = Query(None),
    tableFile: str | None = Query(None),
    columnFile: str | None = Query(None),
):
    request = ValidationReportRequest(
        term_file=_pick(termFile, termFilename),
        files=RelationFilesRequest(
            database_file=_pick(databaseFile),
            entity_file=_pick(entityFile),
            attribute_file=_pick(attributeFile),
            table_file=_pick(tableFile),
            column_file=_pick(columnFile),
        ),
    )
    return _respond(await build_validation_report(steps, request))


@router.post("/alignment/sync")
async def alignment_sync(steps: Steps, body: AlignmentBody | None = None, apply: str | None = Query(None)):
    body = body or AlignmentBody()
    request = AlignmentRequest(
        apply=parse_apply_flag(apply, body.apply),
        vocabulary_filename=_pick(body.vocabularyFilename) or "vocabulary.json",
        domain_filename=_pick(body.domainFilename) or "domain.json",
        term_filename=_pick(body.termFilename) or "term.json",
        column_filename=_pick(body.columnFilename, body.columnFile) or "column.json",
        files=RelationFilesRequest(
            database_file=_pick(body.databaseFile),
            entity_file=_pick(body.entityFile),
            attribute_file=_pick(body.attributeFile),
            table_file=_pick(body.tableFile),
            column_file=_pick(body.columnFile),
        ),
    )
    return _respond(await run_alignment(steps, request))
