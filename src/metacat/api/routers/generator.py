"""
Term generator router.

Endpoints:
    POST /generator           Convert a name part by part (ko-to-en or en-to-ko)
    POST /generator/segment   Split unspaced words into vocabulary words
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from metacat.api.deps import OpContext
from metacat.api.utils import _respond

router = APIRouter(prefix="/generator")


class GenerateBody(BaseModel):
    term: str = ""
    direction: str = "ko-to-en"


def _request(body: GenerateBody, filename: str | None):
    from metacat.ops.requests import GenerateTermRequest

    return GenerateTermRequest(term=body.term, direction=body.direction, filename=filename)


@router.post("")
def generate(ctx: OpContext, body: GenerateBody, filename: str | None = Query(None)):
    from metacat.ops.generator import generate_term_name

    return _respond(generate_term_name(ctx, _request(body, filename)))


@router.post("/segment")
def segment(ctx: OpContext, body: GenerateBody, filename: str | None = Query(None)):
    from metacat.ops.generator import segment_term_name

    return _respond(segment_term_name(ctx, _request(body, filename)))
