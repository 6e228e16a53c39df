"""
Change history per catalog type.

Each catalog directory holds one ``history.json``::

    {"logs": [...newest first...], "lastUpdated": "...", "totalCount": N}

A log records one add/update/delete (or an upload merge) with optional
before/after snapshots. Invalid logs are dropped on load and save.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from metacat.core.errors import ValidationError
from metacat.core.logging import get_logger
from metacat.core.models import HISTORY_FILENAME, CatalogType, get_spec, new_id, now_iso
from metacat.core.storage import CatalogStore

logger = get_logger(__name__)

HISTORY_ACTIONS = frozenset({"add", "update", "delete", "UPLOAD_MERGE"})
_REQUIRED_LOG_FIELDS = ("id", "action", "targetId", "targetName", "timestamp")


@dataclass(slots=True)
class HistoryLog:
    """One history record."""

    action: str
    target_id: str
    target_name: str
    filename: str | None = None
    details: dict[str, Any] | None = None
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=now_iso)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "action": self.action,
            "targetId": self.target_id,
            "targetName": self.target_name,
            "timestamp": self.timestamp,
        }
        if self.filename:
            record["filename"] = self.filename
        if self.details:
            record["details"] = self.details
        return record


def _is_valid_log(log: Any) -> bool:
    return isinstance(log, dict) and all(log.get(k) for k in _REQUIRED_LOG_FIELDS)


class HistoryStore:
    """Reads and appends ``<catalog>/history.json`` through the catalog store."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def path(self, catalog: CatalogType | str) -> Path:
        return self.store.type_dir(catalog) / HISTORY_FILENAME

    def load(self, catalog: CatalogType | str, filename: str | None = None) -> dict[str, Any]:
        """Load logs, newest first; ``filename`` keeps logs of that file or with none."""
        data = self.store.read_document(self.path(catalog)) or {}
        logs = [log for log in data.get("logs", []) if _is_valid_log(log)]
        if filename:
            logs = [log for log in logs if not log.get("filename") or log.get("filename") == filename]
        return {
            "logs": logs,
            "lastUpdated": data.get("lastUpdated", now_iso()),
            "totalCount": len(logs),
        }

    def add(self, catalog: CatalogType | str, log: HistoryLog) -> dict[str, Any]:
        if log.action not in HISTORY_ACTIONS:
            raise ValidationError("action은 add, update, delete 중 하나여야 합니다.")
        if not log.target_id or not log.target_name:
            raise ValidationError("action, targetId, targetName은 필수 항목입니다.")

        spec = get_spec(catalog)
        with self.store.mutation(spec.type, HISTORY_FILENAME):
            current = self.load(spec.type)
            logs = [log.to_record(), *current["logs"]]
            payload = {"logs": logs, "lastUpdated": now_iso(), "totalCount": len(logs)}
            self.store.write_document(self.path(spec.type), payload)
        logger.debug("history_logged", catalog=spec.type.value, action=log.action, target=log.target_id)
        return payload

    def record(
        self,
        catalog: CatalogType | str,
        action: str,
        entry: dict[str, Any],
        *,
        filename: str | None = None,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> None:
        """Convenience wrapper used by the CRUD operations."""
        spec = get_spec(catalog)
        details: dict[str, Any] = {}
        if before is not None:
            details["before"] = before
        if after is not None:
            details["after"] = after
        self.add(
            spec.type,
            HistoryLog(
                action=action,
                target_id=str(entry.get("id", "")),
                target_name=spec.display_name(entry),
                filename=filename,
                details=details or None,
            ),
        )

    def clear(self, catalog: CatalogType | str, *, backup: bool = True) -> str | None:
        """Empty the history. Returns the backup filename when one was written."""
        spec = get_spec(catalog)
        path = self.path(spec.type)
        backup_file: str | None = None
        if backup:
            current = self.store.read_document(path)
            if current and current.get("logs"):
                stamp = datetime.now().strftime("%Y%m%d%H%M%S")
                backup_file = f"history_backup_{stamp}.json"
                self.store.write_document(path.with_name(backup_file), current)
        self.store.write_document(path, {"logs": [], "lastUpdated": now_iso(), "totalCount": 0})
        logger.info("history_cleared", catalog=spec.type.value, backup=backup_file)
        return backup_file
