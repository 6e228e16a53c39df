"""
Structured error types for metacat.

Every error raised by the store, the parsers and the domain services is a
:class:`MetacatError`. Each carries a category, a retry flag and free-form
context so the ops layer can turn it into an ``OperationResult`` failure
without guessing.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                      MetacatError                          │
        │        (category, retryable, context, cause)               │
        ├───────────────────────────────────────────────────────────┤
        │  ValidationError   ConflictError    NotFoundError          │
        │  (VALIDATION)      (CONFLICT)       (NOT_FOUND)            │
        │       │                                                    │
        │  ParseError                                                │
        │                                                            │
        │  StorageError ── FileReadError ── LockTimeoutError         │
        │  (STORAGE)                                                 │
        │                                                            │
        │  ConfigError                                               │
        └───────────────────────────────────────────────────────────┘

Usage:
    from metacat.core.errors import ConflictError

    if existing:
        raise ConflictError("이미 존재하는 파일입니다.").with_context(filename=name)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and HTTP mapping."""

    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    PARSE = "PARSE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


class MetacatError(Exception):
    """Base exception for all metacat errors.

    Subclasses set ``default_category``, ``default_retryable`` and
    ``error_code`` (the ops-layer code the error maps to).
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    error_code: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MetacatError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# REQUEST / DATA ERRORS (never retryable)
# =============================================================================


class ValidationError(MetacatError):
    """Invalid input: missing fields, bad filenames, rule violations."""

    default_category = ErrorCategory.VALIDATION
    error_code = "VALIDATION_FAILED"


class ParseError(ValidationError):
    """Uploaded content (JSON or XLSX) could not be parsed."""

    default_category = ErrorCategory.PARSE


class ConflictError(MetacatError):
    """Uniqueness violation or an already existing resource."""

    default_category = ErrorCategory.CONFLICT
    error_code = "CONFLICT"


class NotFoundError(MetacatError):
    """Entry or file does not exist."""

    default_category = ErrorCategory.NOT_FOUND
    error_code = "NOT_FOUND"


class ConfigError(MetacatError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(MetacatError):
    """Filesystem failure while reading or writing a catalog file."""

    default_category = ErrorCategory.STORAGE
    error_code = "INTERNAL"


class FileReadError(StorageError):
    """A catalog file could not be read or decoded.

    ``recovered_from_backup`` tells whether the backup copy was usable.
    """

    def __init__(self, message: str, *, recovered_from_backup: bool = False, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.recovered_from_backup = recovered_from_backup


class LockTimeoutError(StorageError):
    """The file lock could not be acquired in time."""

    default_retryable = True


__all__ = [
    "ErrorCategory",
    "MetacatError",
    "ValidationError",
    "ParseError",
    "ConflictError",
    "NotFoundError",
    "ConfigError",
    "StorageError",
    "FileReadError",
    "LockTimeoutError",
]
