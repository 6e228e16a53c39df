"""
Error-handling middleware — maps ops-layer errors to RFC 7807 responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from metacat.api.schemas.common import ErrorDetail, ProblemDetail
from metacat.core.logging import get_logger

logger = get_logger(__name__)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
    data: Any = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        error=title,
        data=data,
    )
    if errors:
        body.errors = [
            ErrorDetail(code=str(e.get("code", "")), message=str(e.get("message", "")), field=e.get("field"))
            for e in errors
        ]
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500 with ProblemDetail."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )
