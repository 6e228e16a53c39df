"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers, and
lifespan events into a single ``FastAPI`` instance. It is the single
composition root: one :class:`~metacat.core.storage.CatalogStore` (with
its cache and lock manager) is created here and shared by every request.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from metacat.api.deps import get_settings
from metacat.api.middleware.errors import unhandled_exception_handler
from metacat.api.middleware.request_id import RequestIDMiddleware
from metacat.api.middleware.timing import TimingMiddleware
from metacat.api.settings import MetacatAPISettings
from metacat.core.logging import get_logger
from metacat.core.storage import CatalogStore


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup / shutdown hooks."""
    log = get_logger("metacat.api")
    store: CatalogStore = app.state.store
    store.data_dir.mkdir(parents=True, exist_ok=True)
    log.info("metacat_api_starting", version=app.version, data_dir=str(store.data_dir))
    yield
    log.info("metacat_api_shutting_down")


def create_app(
    *,
    settings: MetacatAPISettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : MetacatAPISettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """

    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # Stash settings and the shared store on app state
    app.state.settings = settings
    app.state.store = CatalogStore.from_settings(settings)

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from metacat.api.routers import (
        catalog,
        columns,
        domains,
        files,
        generator,
        health,
        relations,
        reports,
        terms,
        vocabulary,
    )

    prefix = settings.api_prefix

    # Health endpoints at root level (no prefix) for container healthchecks
    app.include_router(health.router, tags=["health"])

    # Fixed paths first so they win over /<catalog>/{entry_id}
    app.include_router(terms.router, prefix=prefix, tags=["term"])
    app.include_router(columns.router, prefix=prefix, tags=["column"])
    app.include_router(vocabulary.router, prefix=prefix, tags=["vocabulary"])
    app.include_router(domains.router, prefix=prefix, tags=["domain"])
    app.include_router(generator.router, prefix=prefix, tags=["generator"])
    app.include_router(relations.router, prefix=prefix, tags=["erd"])
    app.include_router(reports.router, prefix=prefix, tags=["reports"])
    app.include_router(files.router, prefix=prefix, tags=["files"])
    for router in catalog.routers:
        app.include_router(router, prefix=prefix, tags=["catalog"])

    return app
