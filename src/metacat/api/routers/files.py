"""
Files router — named catalog files, their mappings and change history.

Endpoints:
    GET    /{catalog}/files            List files (creates the default file on first access)
    POST   /{catalog}/files            Create a file ``{filename}``
    PUT    /{catalog}/files            Rename ``{oldFilename, newFilename}``
    DELETE /{catalog}/files?filename=  Delete a file
    GET    /{catalog}/files/mapping    Resolved mapping of a file
    PUT    /{catalog}/files/mapping    Replace mapping entries ``{filename?, mapping}``
    GET    /{catalog}/history          History logs, newest first
    POST   /{catalog}/history          Append a log
    DELETE /{catalog}/history          Clear the log (a backup is kept)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Query
from pydantic import BaseModel, Field

from metacat.api.deps import OpContext
from metacat.api.utils import _respond
from metacat.core.models import CatalogType

router = APIRouter()


class CreateFileBody(BaseModel):
    filename: str = Field("", description="New file name (``.json`` is appended when missing)")


class RenameFileBody(BaseModel):
    oldFilename: str = ""
    newFilename: str = ""


class MappingBody(BaseModel):
    filename: str | None = None
    mapping: dict[str, str] = Field(default_factory=dict)


@router.get("/{catalog}/files")
def list_files(ctx: OpContext, catalog: CatalogType):
    from metacat.ops.files import list_files as _list

    return _respond(_list(ctx, catalog.value))


@router.post("/{catalog}/files", status_code=201)
def create_file(ctx: OpContext, catalog: CatalogType, body: CreateFileBody):
    from metacat.ops.files import create_file as _create

    return _respond(_create(ctx, catalog.value, body.filename), status_code=201)


@router.put("/{catalog}/files")
def rename_file(ctx: OpContext, catalog: CatalogType, body: RenameFileBody):
    from metacat.ops.files import rename_file as _rename

    return _respond(_rename(ctx, catalog.value, body.oldFilename, body.newFilename))


@router.delete("/{catalog}/files")
def delete_file(ctx: OpContext, catalog: CatalogType, filename: str = Query("")):
    from metacat.ops.files import delete_file as _delete

    return _respond(_delete(ctx, catalog.value, filename))


@router.get("/{catalog}/files/mapping")
def get_mapping(ctx: OpContext, catalog: CatalogType, filename: str | None = Query(None)):
    from metacat.ops.files import get_mapping as _get

    return _respond(_get(ctx, catalog.value, filename=filename))


@router.put("/{catalog}/files/mapping")
def set_mapping(
    ctx: OpContext,
    catalog: CatalogType,
    body: MappingBody,
    filename: str | None = Query(None),
):
    from metacat.ops.files import set_mapping as _set

    return _respond(_set(ctx, catalog.value, body.mapping, filename=filename or body.filename))


# ------------------------------------------------------------------ #
# History
# ------------------------------------------------------------------ #


@router.get("/{catalog}/history")
def get_history(
    ctx: OpContext,
    catalog: CatalogType,
    filename: str | None = Query(None),
    limit: int | None = Query(None, description="Maximum number of logs"),
):
    from metacat.ops.history import get_history as _get

    return _respond(_get(ctx, catalog.value, filename=filename, limit=limit))


@router.post("/{catalog}/history")
def add_history(ctx: OpContext, catalog: CatalogType, body: dict[str, Any] = Body(...)):
    from metacat.ops.history import add_history as _add

    return _respond(_add(ctx, catalog.value, body))


@router.delete("/{catalog}/history")
def clear_history(ctx: OpContext, catalog: CatalogType):
    from metacat.ops.history import clear_history as _clear

    return _respond(_clear(ctx, catalog.value))
