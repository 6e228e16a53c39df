"""
Column pipeline router.

Endpoints:
    POST /column/sync-term    Derive column fields from terms and domains
    GET  /column/sync-term    Same computation, never written
    GET  /column/download     Column definitions as an XLSX workbook
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.responses import Response
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _handle_error, _respond
from metacat.orchestration.alignment import parse_apply_flag

router = APIRouter(prefix="/column")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class SyncColumnsBody(BaseModel):
    columnFilename: str | None = None
    termFilename: str | None = None
    domainFilename: str | None = None
    apply: bool | None = None


@router.post("/sync-term")
def sync_column_terms(ctx: OpContext, body: SyncColumnsBody | None = None, apply: str | None = Query(None)):
    from metacat.ops.columns import sync_column_terms as _sync
    from metacat.ops.requests import SyncColumnsRequest

    body = body or SyncColumnsBody()
    request = SyncColumnsRequest(
        column_filename=body.columnFilename,
        term_filename=body.termFilename,
        domain_filename=body.domainFilename,
        apply=parse_apply_flag(apply, body.apply),
    )
    return _respond(_sync(ctx, request))


@router.get("/sync-term")
def column_sync_status(
    ctx: OpContext,
    columnFilename: str | None = Query(None),
    termFilename: str | None = Query(None),
    domainFilename: str | None = Query(None),
):
    from metacat.ops.columns import column_sync_status as _status
    from metacat.ops.requests import SyncColumnsRequest

    request = SyncColumnsRequest(
        column_filename=columnFilename,
        term_filename=termFilename,
        domain_filename=domainFilename,
        apply=False,
    )
    return _respond(_status(ctx, request))


@router.get("/download")
def download(ctx: OpContext, filename: str | None = Query(None)):
    from metacat.ops.columns import export_columns

    result = export_columns(ctx, filename)
    if not result.success:
        return _handle_error(result)
    stem = (filename or "column.json").rsplit(".", 1)[0]
    download_name = f"{stem}_컬럼정의서.xlsx"
    return Response(
        content=result.data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(download_name)}"},
    )
