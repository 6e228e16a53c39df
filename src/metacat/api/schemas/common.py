"""
Common API schemas — shared envelopes and RFC 7807 errors.

Every endpoint returns either :class:`SuccessResponse` (200/201) or
:class:`ProblemDetail` (4xx/5xx). Both carry a ``success`` flag so
clients can branch on one field.

Response Envelope Conventions:
    - All 2xx JSON responses use ``SuccessResponse[T]``
    - All 4xx/5xx responses use ``ProblemDetail`` (RFC 7807) plus
      ``success: false``, ``error`` (same as ``title``) and optional ``data``
    - ``elapsed_ms`` tracks server-side processing time
    - ``warnings`` contains non-fatal issues to display to users
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# ── RFC 7807 Problem Detail ─────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Structured error detail for field-level or nested errors."""

    code: str = Field(description="Machine-readable error code (e.g., 'missing', 'TERM_NAME_MAPPING')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs», extended with the success flag.

    Error Codes:
        - ``NOT_FOUND`` (404): Entry or file does not exist
        - ``VALIDATION_FAILED`` (400): Invalid input or rule violation
        - ``CONFLICT`` (409): Duplicate name, abbreviation or key
        - ``LOCKED`` (423): File lock could not be acquired
        - ``INTERNAL`` (500): Unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "이미 존재하는 용어명입니다.",
            "status": 409,
            "detail": "",
            "instance": "/api/term/validate",
            "errors": [],
            "success": false,
            "error": "이미 존재하는 용어명입니다.",
            "data": {"errors": [...], "errorCount": 1}
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code (e.g., 400, 404, 500)")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(
        default_factory=list,
        description="List of field-level or nested error details",
    )
    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(default="", description="Same as title")
    data: Any | None = Field(default=None, description="Error payload, e.g. failedStep or validation errors")


# ── Success Envelope ─────────────────────────────────────────────────────


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope.

    UI Hints:
        Extract ``data`` for display content.
        Show ``message`` and ``warnings`` as toast notifications if present.
    """

    success: bool = Field(default=True, description="Always true for 2xx responses")
    data: T = Field(description="Response payload (type varies by endpoint)")
    message: str | None = Field(default=None, description="Human-readable outcome")
    elapsed_ms: float = Field(default=0.0, description="Server-side processing time in milliseconds")
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal warnings to display to users",
    )
