"""
Operation result envelope.

Provides :class:`OperationResult`, a typed success/failure envelope that
every operation function returns. It carries *warnings*, *elapsed_ms* and
*metadata* alongside the payload so API and CLI consumers render it the
same way.

Typed store errors (:class:`~metacat.core.errors.MetacatError`) are turned
into failures with :func:`fail_from`; the error's ``error_code`` picks the
result code and so the HTTP status.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, TypeVar

from metacat.core.errors import ErrorCategory, MetacatError

T = TypeVar("T")

# Result code → HTTP status. Shared by the API error mapping and the
# in-process step client of the alignment pipeline.
ERROR_CODE_TO_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "VALIDATION_FAILED": 400,
    "INVALID_INPUT": 400,
    "CONFLICT": 409,
    "LOCKED": 423,
    "NOT_IMPLEMENTED": 501,
    "INTERNAL": 500,
}


def status_for_code(code: str | None) -> int:
    return ERROR_CODE_TO_STATUS.get(code or "", 500)


@dataclass(frozen=True, slots=True)
class OperationError:
    """Structured error detail for failed operations.

    Attributes:
        code: Machine-readable code (``NOT_FOUND``, ``VALIDATION_FAILED``, …).
        message: Human-readable description of the error.
        category: Optional :class:`ErrorCategory`.
        details: Extra key/value context. ``details["data"]`` is forwarded
            to the client as the response ``data`` (e.g. ``failedStep``).
        retryable: Whether the caller should retry the operation.
        status: Explicit HTTP status overriding the code mapping.
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False
    status: int | None = None


@dataclass
class OperationResult[T]:
    """Envelope returned by every operation function.

    Factory methods :meth:`ok` and :meth:`fail` should be used instead of
    the constructor directly.
    """

    success: bool
    data: T | None = None
    error: OperationError | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)
    message: str | None = None

    # ------------------------------------------------------------------ #
    # Factory helpers
    # ------------------------------------------------------------------ #

    @classmethod
    def ok(
        cls,
        data: T,
        *,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
        message: str | None = None,
    ) -> OperationResult[T]:
        """Create a successful result."""
        return cls(
            success=True,
            data=data,
            warnings=warnings or [],
            elapsed_ms=elapsed_ms,
            metadata=metadata or {},
            message=message,
        )

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
        status: int | None = None,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> OperationResult[T]:
        """Create a failed result."""
        return cls(
            success=False,
            error=OperationError(
                code=code,
                message=message,
                category=category,
                details=details or {},
                retryable=retryable,
                status=status,
            ),
            warnings=warnings or [],
            elapsed_ms=elapsed_ms,
            metadata=metadata or {},
        )

    @property
    def status(self) -> int:
        """HTTP status this result maps to."""
        if self.success or self.error is None:
            return 200
        return self.error.status or status_for_code(self.error.code)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (for JSON responses)."""
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.message:
            d["message"] = self.message
        if self.error is not None:
            d["error"] = {
                "code": self.error.code,
                "message": self.error.message,
                "retryable": self.error.retryable,
            }
            if self.error.details:
                d["error"]["details"] = self.error.details
        if self.warnings:
            d["warnings"] = self.warnings
        if self.elapsed_ms:
            d["elapsed_ms"] = round(self.elapsed_ms, 2)
        if self.metadata:
            d["metadata"] = self.metadata
        return d


def fail_from(
    exc: MetacatError,
    *,
    elapsed_ms: float = 0.0,
    details: dict[str, Any] | None = None,
) -> OperationResult[Any]:
    """Failure result for a typed metacat error."""
    merged = {**exc.context, **(details or {})}
    if getattr(exc, "recovered_from_backup", None) is not None:
        merged.setdefault("recoveredFromBackup", exc.recovered_from_backup)
    return OperationResult.fail(
        exc.error_code,
        exc.message,
        category=exc.category,
        details=merged,
        retryable=exc.retryable,
        elapsed_ms=elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Timing helper
# ------------------------------------------------------------------ #


class _Timer:
    """Minimal stopwatch for timing operations."""

    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000


def start_timer() -> _Timer:
    """Return a lightweight timer.  Use ``timer.elapsed_ms`` when done."""
    return _Timer()
