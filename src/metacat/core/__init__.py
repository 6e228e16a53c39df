"""
metacat.core — storage, models, errors and logging primitives.

Everything above this package (rules, ops, orchestration, api, cli)
depends on it; nothing here imports upward.
"""

from metacat.core.errors import (
    ConflictError,
    ErrorCategory,
    FileReadError,
    LockTimeoutError,
    MetacatError,
    NotFoundError,
    ParseError,
    StorageError,
    ValidationError,
)
from metacat.core.models import CATALOGS, CatalogSpec, CatalogType, get_spec
from metacat.core.storage import CatalogStore

__all__ = [
    "CATALOGS",
    "CatalogSpec",
    "CatalogStore",
    "CatalogType",
    "ConflictError",
    "ErrorCategory",
    "FileReadError",
    "LockTimeoutError",
    "MetacatError",
    "NotFoundError",
    "ParseError",
    "StorageError",
    "ValidationError",
    "get_spec",
]
