"""
Catalog entry router — one instance per catalog type.

Endpoints (``<catalog>`` is vocabulary, domain, term, database, entity,
attribute, table or column):
    GET    /<catalog>                  Search, filter, sort and page entries
    GET    /<catalog>/filter-options   Distinct values per searchable field
    POST   /<catalog>/upload           Merge uploaded entries (JSON; XLSX for column)
    GET    /<catalog>/{id}             One entry
    POST   /<catalog>                  Create an entry (201)
    PUT    /<catalog>                  Merge-patch an entry by ``id``
    DELETE /<catalog>?id=              Delete an entry; references come back as warnings
"""

from __future__ import annotations

import re
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from starlette.concurrency import run_in_threadpool

from metacat.api.deps import OpContext
from metacat.api.middleware.errors import problem_response
from metacat.api.utils import _respond
from metacat.core.models import CatalogType

_FILTER_PARAM = re.compile(r"^filters\[(.+)\]$")


def parse_filters(request: Request) -> dict[str, str]:
    """``filters[col]=val`` query parameters as ``{col: val}``."""
    filters: dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        match = _FILTER_PARAM.match(key)
        if match and value.strip():
            filters[match.group(1)] = value
    return filters


def create_catalog_router(catalog: CatalogType) -> APIRouter:
    """Build the entry router for one catalog type."""
    router = APIRouter(prefix=f"/{catalog.value}")
    name = catalog.value

    @router.get("", name=f"list_{name}")
    def list_entries(
        ctx: OpContext,
        request: Request,
        page: int = Query(1, description="Page number (1-indexed)"),
        limit: int = Query(20, description="Items per page"),
        sortBy: str | None = Query(None, description="Comma-separated sort fields"),
        sortOrder: str | None = Query(None, description="Comma-separated asc/desc per field"),
        query: str | None = Query(None, description="Search text"),
        field: str | None = Query(None, description="Field to search, or 'all'"),
        exact: bool = Query(False, description="Exact match instead of substring"),
        filename: str | None = Query(None, description="Catalog file"),
    ):
        from metacat.ops.catalog import list_entries as _list
        from metacat.ops.requests import ListEntriesRequest

        result = _list(
            ctx,
            ListEntriesRequest(
                catalog=name,
                filename=filename,
                page=page,
                limit=limit,
                sort_by=sortBy,
                sort_order=sortOrder,
                query=query,
                search_field=field,
                exact=exact,
                filters=parse_filters(request),
            ),
        )
        return _respond(result)

    @router.get("/filter-options", name=f"filter_options_{name}")
    def filter_options(ctx: OpContext, filename: str | None = Query(None)):
        from metacat.ops.catalog import filter_options as _options

        return _respond(_options(ctx, name, filename=filename))

    @router.post("/upload", name=f"upload_{name}")
    async def upload(
        ctx: OpContext,
        request: Request,
        filename: str | None = Query(None),
        replace: bool = Query(False, description="Replace the file's entries instead of merging"),
    ):
        """Merge ``{entries: [...]}``; the column catalog also takes a multipart ``.xlsx`` file."""
        content_type = request.headers.get("content-type", "")

        if content_type.startswith("multipart/form-data"):
            if catalog is not CatalogType.COLUMN:
                return problem_response(status=400, title="XLSX 업로드는 컬럼 정의서만 지원합니다.")
            form = await request.form()
            upload_file = form.get("file")
            if upload_file is None or isinstance(upload_file, str):
                return problem_response(status=400, title="업로드된 파일이 없습니다.")
            if not (upload_file.filename or "").lower().endswith(".xlsx"):
                return problem_response(status=400, title="xlsx 파일만 업로드할 수 있습니다.")
            content = await upload_file.read()

            from metacat.ops.columns import import_column_workbook

            result = await run_in_threadpool(
                import_column_workbook, ctx, content, filename=filename, replace_entries=replace
            )
            return _respond(result)

        try:
            body = await request.json()
        except ValueError:
            return problem_response(status=400, title="요청 본문이 올바른 JSON이 아닙니다.")
        entries = body.get("entries") if isinstance(body, dict) else body
        if not isinstance(entries, list):
            return problem_response(status=400, title="entries 배열이 필요합니다.")

        from metacat.ops.catalog import upload_entries
        from metacat.ops.requests import UploadEntriesRequest

        request_obj = UploadEntriesRequest(catalog=name, entries=entries, filename=filename, replace=replace)
        return _respond(await run_in_threadpool(upload_entries, ctx, request_obj))

    @router.get("/{entry_id}", name=f"get_{name}")
    def get_entry(ctx: OpContext, entry_id: str, filename: str | None = Query(None)):
        from metacat.ops.catalog import get_entry as _get

        return _respond(_get(ctx, name, entry_id, filename=filename))

    @router.post("", status_code=201, name=f"create_{name}")
    def create_entry(
        ctx: OpContext,
        body: dict[str, Any] = Body(..., description="Entry fields; id and timestamps are assigned"),
        filename: str | None = Query(None),
    ):
        from metacat.ops.catalog import create_entry as _create

        return _respond(_create(ctx, name, body, filename=filename), status_code=201)

    @router.put("", name=f"update_{name}")
    def update_entry(
        ctx: OpContext,
        body: dict[str, Any] = Body(..., description="``id`` plus the fields to change"),
        filename: str | None = Query(None),
    ):
        from metacat.ops.catalog import update_entry as _update

        return _respond(_update(ctx, name, body, filename=filename))

    @router.delete("", name=f"delete_{name}")
    def delete_entry(
        ctx: OpContext,
        id: str | None = Query(None, description="Entry id"),
        filename: str | None = Query(None),
        force: bool = Query(False, description="Skip the reference check"),
    ):
        from metacat.ops.catalog import delete_entry as _delete

        return _respond(_delete(ctx, name, id, filename=filename, force=force))

    return router


routers: list[APIRouter] = [create_catalog_router(t) for t in CatalogType]
