"""
Shared API router utilities.

- ``_respond()`` — wrap a successful OperationResult in the success envelope
- ``_handle_error()`` — convert a failed OperationResult to a ``problem_response``
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from metacat.api.middleware.errors import problem_response
from metacat.api.schemas.common import SuccessResponse
from metacat.ops.result import OperationResult


def _respond(result: OperationResult[Any], *, status_code: int = 200) -> JSONResponse:
    """Success envelope for *result*, or the problem response when it failed."""
    if not result.success:
        return _handle_error(result)
    body = SuccessResponse[Any](
        data=result.data,
        message=result.message,
        elapsed_ms=round(result.elapsed_ms, 2),
        warnings=result.warnings,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _handle_error(result: OperationResult[Any]) -> JSONResponse:
    """Convert a failed ``OperationResult`` into a Problem Details response.

    The status comes from the result (explicit status, else the error-code
    mapping); the error message becomes the problem title. ``details["data"]``
    is forwarded as ``data`` and ``details["errors"]`` as field errors.
    """
    error = result.error
    if error is None:
        return problem_response(status=500, title="Operation failed")
    return problem_response(
        status=result.status,
        title=error.message,
        errors=error.details.get("errors") if isinstance(error.details.get("errors"), list) else None,
        data=error.details.get("data"),
    )
