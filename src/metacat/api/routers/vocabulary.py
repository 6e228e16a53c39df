"""
Vocabulary pipeline router.

Endpoints:
    POST /vocabulary/sync-domain   Map word domain categories to domain groups
    GET  /vocabulary/duplicates    Words sharing a name, abbreviation or English name
    POST /vocabulary/validate      Validate one word before saving
    GET  /vocabulary/validate-all  Validate every word of a file
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _respond
from metacat.orchestration.alignment import parse_apply_flag

router = APIRouter(prefix="/vocabulary")


class SyncDomainBody(BaseModel):
    vocabularyFilename: str | None = None
    domainFilename: str | None = None
    apply: bool | None = None


class ValidateWordBody(BaseModel):
    standardName: str = ""
    abbreviation: str = ""
    entryId: str | None = None


@router.post("/sync-domain")
def sync_domain(ctx: OpContext, body: SyncDomainBody | None = None, apply: str | None = Query(None)):
    from metacat.ops.requests import SyncVocabularyDomainRequest
    from metacat.ops.vocabulary import sync_vocabulary_domain

    body = body or SyncDomainBody()
    request = SyncVocabularyDomainRequest(
        vocabulary_filename=body.vocabularyFilename,
        domain_filename=body.domainFilename,
        apply=parse_apply_flag(apply, body.apply),
    )
    return _respond(sync_vocabulary_domain(ctx, request))


@router.get("/duplicates")
def duplicates(ctx: OpContext, filename: str | None = Query(None)):
    from metacat.ops.vocabulary import find_duplicate_vocabulary

    return _respond(find_duplicate_vocabulary(ctx, filename))


@router.post("/validate")
def validate_word(ctx: OpContext, body: ValidateWordBody, filename: str | None = Query(None)):
    from metacat.ops.requests import ValidateVocabularyRequest
    from metacat.ops.vocabulary import validate_vocabulary_entry

    request = ValidateVocabularyRequest(
        standard_name=body.standardName,
        abbreviation=body.abbreviation,
        filename=filename,
        entry_id=body.entryId,
    )
    return _respond(validate_vocabulary_entry(ctx, request))


@router.get("/validate-all")
def validate_all(ctx: OpContext, filename: str | None = Query(None)):
    from metacat.ops.vocabulary import validate_all_vocabulary

    return _respond(validate_all_vocabulary(ctx, filename))
