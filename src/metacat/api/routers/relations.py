"""
Design-relation router.

Endpoints:
    GET  /erd/relations        Check references between the design catalogs
    POST /erd/relations/sync   Plan (and with ``apply``, write) relation fixes
    GET  /erd/relations/sync   Same, from query parameters
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _respond
from metacat.ops.requests import RelationFilesRequest
from metacat.orchestration.alignment import parse_apply_flag

router = APIRouter(prefix="/erd")


class RelationSyncBody(BaseModel):
    apply: bool | None = None
    databaseFile: str | None = None
    entityFile: str | None = None
    attributeFile: str | None = None
    tableFile: str | None = None
    columnFile: str | None = None


def _files(
    databaseFile: str | None,
    entityFile: str | None,
    attributeFile: str | None,
    tableFile: str | None,
    columnFile: str | None,
) -> RelationFilesRequest:
    return RelationFilesRequest(
        database_file=databaseFile,
        entity_file=entityFile,
        attribute_file=attributeFile,
        table_file=tableFile,
        column_file=columnFile,
    )


@router.get("/relations")
def validate_relations(
    ctx: OpContext,
    databaseFile: str | None = Query(None),
    entityFile: str | None = Query(None),
    attributeFile: str | None = Query(None),
    tableFile: str | None = Query(None),
    columnFile: str | None = Query(None),
):
    from metacat.ops.relations import validate_design_relations

    files = _files(databaseFile, entityFile, attributeFile, tableFile, columnFile)
    return _respond(validate_design_relations(ctx, files))


@router.post("/relations/sync")
def sync_relations(ctx: OpContext, body: RelationSyncBody | None = None, apply: str | None = Query(None)):
    from metacat.ops.relations import sync_relations as _sync
    from metacat.ops.requests import SyncRelationsRequest

    body = body or RelationSyncBody()
    files = _files(body.databaseFile, body.entityFile, body.attributeFile, body.tableFile, body.columnFile)
    request = SyncRelationsRequest(files=files, apply=parse_apply_flag(apply, body.apply, default=False))
    return _respond(_sync(ctx, request))


@router.get("/relations/sync")
def relation_sync_preview(
    ctx: OpContext,
    apply: str | None = Query(None),
    databaseFile: str | None = Query(None),
    entityFile: str | None = Query(None),
    attributeFile: str | None = Query(None),
    tableFile: str | None = Query(None),
    columnFile: str | None = Query(None),
):
    from metacat.ops.relations import sync_relations as _sync
    from metacat.ops.requests import SyncRelationsRequest

    files = _files(databaseFile, entityFile, attributeFile, tableFile, columnFile)
    request = SyncRelationsRequest(files=files, apply=parse_apply_flag(apply, default=False))
    return _respond(_sync(ctx, request))
