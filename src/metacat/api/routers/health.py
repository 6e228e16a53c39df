"""
Health endpoints at the root level (no prefix) for container healthchecks.

    GET /health         Liveness plus the data-directory check
    GET /health/live    Liveness probe, always 200
    GET /health/ready   Readiness probe, 503 when the data directory is unusable
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/health")


def _data_dir_check(request: Request) -> dict[str, Any]:
    data_dir = request.app.state.store.data_dir
    writable = data_dir.is_dir() and os.access(data_dir, os.W_OK)
    return {"status": "healthy" if writable else "unhealthy", "path": str(data_dir)}


def _body(request: Request, status: str, checks: dict[str, Any]) -> dict[str, Any]:
    return {
        "status": status,
        "service": "metacat",
        "version": request.app.state.settings.api_version,
        "timestamp": datetime.now(UTC).isoformat(),
        "checks": checks,
    }


@router.get("")
def health(request: Request):
    check = _data_dir_check(request)
    status = "healthy" if check["status"] == "healthy" else "degraded"
    return _body(request, status, {"data_dir": check})


@router.get("/live")
def live(request: Request):
    return _body(request, "healthy", {})


@router.get("/ready")
def ready(request: Request):
    check = _data_dir_check(request)
    if check["status"] != "healthy":
        return JSONResponse(status_code=503, content=_body(request, "unhealthy", {"data_dir": check}))
    return _body(request, "healthy", {"data_dir": check})
