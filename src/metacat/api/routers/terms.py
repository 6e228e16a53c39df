"""
Term pipeline router.

Endpoints:
    POST /term/validate        Validate one term before saving (create or edit mode)
    GET  /term/validate-all    Validate every term of a file, with auto-fix suggestions
    POST /term/sync            Recompute mapping flags of a term file
    POST /term/recommend       Domain names for a term, from its last word
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _respond
from metacat.orchestration.alignment import parse_apply_flag

router = APIRouter(prefix="/term")


class ValidateTermBody(BaseModel):
    termName: str = ""
    columnName: str = ""
    domainName: str = ""


class SyncTermsBody(BaseModel):
    filename: str | None = None
    apply: bool | None = None


class RecommendBody(BaseModel):
    filename: str | None = None
    termName: str = ""


@router.post("/validate")
def validate_term(
    ctx: OpContext,
    body: ValidateTermBody,
    filename: str | None = Query(None),
    entryId: str | None = Query(None, description="Editing this entry (skips duplicate checks)"),
):
    from metacat.ops.requests import ValidateTermRequest
    from metacat.ops.terms import validate_term_entry

    request = ValidateTermRequest(
        term_name=body.termName,
        column_name=body.columnName,
        domain_name=body.domainName,
        filename=filename,
        entry_id=entryId,
    )
    return _respond(validate_term_entry(ctx, request))


@router.get("/validate-all")
def validate_all(ctx: OpContext, filename: str | None = Query(None)):
    from metacat.ops.terms import validate_all_terms

    return _respond(validate_all_terms(ctx, filename))


@router.post("/sync")
def sync_terms(ctx: OpContext, body: SyncTermsBody | None = None, apply: str | None = Query(None)):
    from metacat.ops.requests import SyncTermsRequest
    from metacat.ops.terms import sync_terms as _sync

    body = body or SyncTermsBody()
    request = SyncTermsRequest(filename=body.filename, apply=parse_apply_flag(apply, body.apply))
    return _respond(_sync(ctx, request))


@router.post("/recommend")
def recommend(ctx: OpContext, body: RecommendBody):
    from metacat.ops.requests import RecommendDomainRequest
    from metacat.ops.terms import recommend_term_domains

    request = RecommendDomainRequest(term_name=body.termName, filename=body.filename)
    return _respond(recommend_term_domains(ctx, request))
