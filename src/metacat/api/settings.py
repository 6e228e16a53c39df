"""
API-specific settings.

Extends :class:`~metacat.core.settings.MetacatSettings` with parameters
that govern the REST transport (bind address, CORS, prefix).

All values can be overridden via environment variables prefixed with
``METACAT_`` (``METACAT_API_PREFIX``, ``METACAT_PORT``, …).
"""

from __future__ import annotations

from pydantic import Field

from metacat.core.settings import MetacatSettings


class MetacatAPISettings(MetacatSettings):
    """Settings for the metacat REST API.

    Order of precedence (highest → lowest):
        1. Environment variables (``METACAT_API_PREFIX``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api", description="URL prefix for all endpoints")
    api_title: str = Field(default="metacat API", description="OpenAPI title")
    api_version: str = Field(default="0.3.0", description="OpenAPI version string")

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
