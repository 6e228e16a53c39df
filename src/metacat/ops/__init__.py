"""
Operations layer — pure business logic for metacat.

The ops package provides typed request/response functions over the catalog
store and the rule engines, with consistent patterns:

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- All functions are transport-agnostic (no HTTP, no CLI knowledge)
- Mutating functions support ``dry_run`` mode for safe previews

Usage::

    from metacat.core.storage import CatalogStore
    from metacat.ops import OperationContext
    from metacat.ops.terms import validate_all_terms

    ctx = OperationContext(store=CatalogStore("static/data"))
    result = validate_all_terms(ctx, "term.json")
    assert result.success
"""

from metacat.ops.context import OperationContext
from metacat.ops.result import OperationError, OperationResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
]
