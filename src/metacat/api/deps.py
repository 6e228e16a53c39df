"""
FastAPI dependency injection — shared singletons and per-request factories.

Usage in routers::

    from metacat.api.deps import OpContext, Settings

    @router.get("/things")
    def list_things(ctx: OpContext, settings: Settings):
        ...
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from metacat.api.settings import MetacatAPISettings
from metacat.core.storage import CatalogStore
from metacat.ops.context import OperationContext
from metacat.orchestration.steps import InProcessStepClient, StepClient

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> MetacatAPISettings:
    """Cached settings — loaded once per process."""
    return MetacatAPISettings()


# ── Catalog store (one per app) ──────────────────────────────────────────


def get_store(request: Request) -> CatalogStore:
    """The app's store; its cache and lock manager are shared by all requests."""
    return request.app.state.store


# ── Operation context (per-request) ──────────────────────────────────────


def get_operation_context(
    request: Request,
    store: Annotated[CatalogStore, Depends(get_store)],
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(
        store=store,
        request_id=request_id,
        caller="api",
    )


def get_step_client(ctx: Annotated[OperationContext, Depends(get_operation_context)]) -> StepClient:
    """Step client used by the report and alignment endpoints."""
    return InProcessStepClient(ctx)


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[MetacatAPISettings, Depends(get_settings)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
Steps = Annotated[StepClient, Depends(get_step_client)]
