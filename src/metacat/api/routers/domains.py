"""
Domain validation router.

Endpoints:
    POST /domain/validate       Validate a domain before saving (generated name must be unique)
    GET  /domain/validate-all   Validate every domain of a file
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _respond

router = APIRouter(prefix="/domain")


class ValidateDomainBody(BaseModel):
    domainCategory: str = ""
    physicalDataType: str = ""
    dataLength: str | int | None = None
    decimalPlaces: str | int | None = None
    entryId: str | None = None


def _optional(value: str | int | None) -> str | None:
    return None if value is None else str(value)


@router.post("/validate")
def validate_domain(ctx: OpContext, body: ValidateDomainBody):
    from metacat.ops.domains import validate_domain_entry
    from metacat.ops.requests import ValidateDomainRequest

    request = ValidateDomainRequest(
        domain_category=body.domainCategory,
        physical_data_type=body.physicalDataType,
        data_length=_optional(body.dataLength),
        decimal_places=_optional(body.decimalPlaces),
        entry_id=body.entryId,
    )
    return _respond(validate_domain_entry(ctx, request))


@router.get("/validate-all")
def validate_all(ctx: OpContext, filename: str | None = Query(None)):
    from metacat.ops.domains import validate_all_domains

    return _respond(validate_all_domains(ctx, filename))
