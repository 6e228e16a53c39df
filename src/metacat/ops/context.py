"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the catalog store (and through it the cache
and lock manager), caller identity, dry-run flag, and arbitrary metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from metacat.core.history import HistoryStore
from metacat.core.storage import CatalogStore


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        store: Catalog store every read and write goes through.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request, ``"api"``, ``"cli"`` or ``"sdk"``.
        user: Optional user identifier.
        dry_run: When ``True``, mutating operations return a preview.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    store: CatalogStore
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    user: str | None = None
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def history(self) -> HistoryStore:
        return HistoryStore(self.store)
