"""Base settings for metacat.

``MetacatSettings`` holds what every entry point (API, CLI) needs: where
the catalog files live, logging, and lock timing. The API extends it with
transport knobs in :mod:`metacat.api.settings`.

All values can be overridden with ``METACAT_``-prefixed environment
variables or a ``.env`` file.

Examples:
    >>> from metacat.core.settings import MetacatSettings
    >>> MetacatSettings(data_dir="/tmp/catalogs").data_dir
    PosixPath('/tmp/catalogs')
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MetacatSettings(BaseSettings):
    """Common settings shared by the API server and the CLI.

    Fields
    ──────
    data_dir                : Root directory holding ``<catalog>/<file>.json``
    debug                   : Enable debug mode (error details in responses)
    log_level               : Structlog log level
    log_json                : Force JSON log output (auto-detect when unset)
    lock_timeout_seconds    : Give up acquiring a file lock after this long
    lock_stale_seconds      : Lock files older than this are taken over
    lock_retry_interval_ms  : Sleep between lock attempts
    """

    model_config = SettingsConfigDict(
        env_prefix="METACAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(
        default=Path("static/data"),
        description="Root directory of the catalog files",
    )

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── Locking ──────────────────────────────────────────────────
    lock_timeout_seconds: float = Field(default=30.0, gt=0)
    lock_stale_seconds: float = Field(default=60.0, gt=0)
    lock_retry_interval_ms: int = Field(default=100, ge=1)
    lock_max_retries: int = Field(default=300, ge=1)
