"""
Catalog store — named JSON collections per catalog type.

Layout on disk::

    <data_dir>/
        vocabulary/vocabulary.json
        vocabulary/history.json
        term/term.json
        term/term_backup_latest.json
        column/column.json
        ...

Every catalog file holds ``{entries, lastUpdated, totalCount, mapping?}``.
The store is the only stateful component of metacat. It is built from
three collaborators:

* a :class:`~metacat.core.cache.CatalogCache` (read-through, invalidated
  on every write),
* a :class:`~metacat.core.locks.LockManager` (one lock per file write,
  plus an in-process :meth:`CatalogStore.mutation` lock held across
  read-modify-write),
* atomic writes (temp file + ``os.replace``) with a rolling backup copy
  used to recover from a corrupt primary.

Guardrails:
    ❌ DON'T: Build paths from user input by hand
    ✅ DO: Go through :meth:`CatalogStore.resolve_path` (rejects traversal)

    ❌ DON'T: Mutate a payload returned by ``load`` and expect it persisted
    ✅ DO: Call ``save`` (payloads are private copies)
"""

from __future__ import annotations

import json
import os
import re
import shutil
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from metacat.core.cache import CatalogCache, InMemoryCatalogCache
from metacat.core.errors import (
    ConfigError,
    ConflictError,
    FileReadError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from metacat.core.locks import FileLockManager, LockManager
from metacat.core.logging import get_logger
from metacat.core.models import (
    BACKUP_MARKER,
    CATALOGS,
    FORBIDDEN_WORDS_FILENAME,
    HISTORY_FILENAME,
    PROTECTED_FILENAMES,
    CatalogType,
    get_spec,
    now_iso,
)

logger = get_logger(__name__)

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")


def validate_filename(filename: str | None) -> str:
    """Return a safe ``*.json`` filename or raise :class:`ValidationError`.

    >>> validate_filename("my_terms")
    'my_terms.json'
    """
    name = (filename or "").strip()
    if not name:
        raise ValidationError("파일명이 필요합니다.")
    if ".." in name or "\x00" in name:
        raise ValidationError("잘못된 파일명입니다.").with_context(filename=name)
    if name.startswith(("/", "\\")) or _DRIVE_LETTER.match(name):
        raise ValidationError("절대 경로는 사용할 수 없습니다.").with_context(filename=name)
    if "/" in name or "\\" in name:
        raise ValidationError("파일명에 경로 구분자를 포함할 수 없습니다.").with_context(filename=name)
    if not name.endswith(".json"):
        name = f"{name}.json"
    return name


def backup_name(filename: str) -> str:
    stem = filename[: -len(".json")] if filename.endswith(".json") else filename
    return f"{stem}{BACKUP_MARKER}latest.json"


class CatalogStore:
    """Load/save/merge catalog files with caching, locking and backups."""

    def __init__(
        self,
        data_dir: str | Path,
        *,
        cache: CatalogCache | None = None,
        locks: LockManager | None = None,
    ):
        self.data_dir = Path(data_dir).expanduser()
        self.cache: CatalogCache = cache if cache is not None else InMemoryCatalogCache()
        self.locks: LockManager = locks if locks is not None else FileLockManager()
        self._mutations: dict[Path, threading.RLock] = {}
        self._mutations_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Any, *, cache: CatalogCache | None = None) -> CatalogStore:
        data_dir = Path(settings.data_dir).expanduser()
        if data_dir.exists() and not data_dir.is_dir():
            raise ConfigError(f"data_dir is not a directory: {data_dir}")
        locks = FileLockManager(
            timeout_seconds=settings.lock_timeout_seconds,
            stale_seconds=settings.lock_stale_seconds,
            retry_interval_ms=settings.lock_retry_interval_ms,
            max_retries=settings.lock_max_retries,
        )
        return cls(data_dir, cache=cache, locks=locks)

    # ------------------------------------------------------------------ #
    # Paths
    # ------------------------------------------------------------------ #

    def type_dir(self, catalog: CatalogType | str) -> Path:
        return self.data_dir / get_spec(catalog).type.value

    def resolve_path(self, catalog: CatalogType | str, filename: str | None = None) -> Path:
        spec = get_spec(catalog)
        name = validate_filename(filename or spec.default_filename)
        base = self.type_dir(spec.type).resolve()
        path = (base / os.path.basename(name)).resolve()
        if path.parent != base:
            raise ValidationError("허용되지 않은 경로입니다.").with_context(filename=name)
        return path

    def exists(self, catalog: CatalogType | str, filename: str | None = None) -> bool:
        return self.resolve_path(catalog, filename).is_file()

    # ------------------------------------------------------------------ #
    # Load
    # ------------------------------------------------------------------ #

    def load(self, catalog: CatalogType | str, filename: str | None = None) -> dict[str, Any]:
        """Load a catalog file (cached).

        A missing or empty *default* file is created with the default
        payload. A corrupt file is recovered from its backup when possible.
        """
        spec = get_spec(catalog)
        name = validate_filename(filename or spec.default_filename)

        cached = self.cache.get(spec.type.value, name)
        if cached is not None:
            return cached

        path = self.resolve_path(spec.type, name)
        is_default = name == spec.default_filename

        if not path.is_file() or path.stat().st_size == 0:
            payload = spec.create_default()
            if is_default:
                self._write(path, payload)
                logger.info("default_catalog_created", catalog=spec.type.value, filename=name)
            self.cache.set(spec.type.value, name, payload)
            return payload

        payload = self._read_with_recovery(path, spec.type.value, name)
        payload = self._normalize(spec.type, payload)
        self.cache.set(spec.type.value, name, payload)
        return payload

    def load_entries(self, catalog: CatalogType | str, filename: str | None = None) -> list[dict[str, Any]]:
        return list(self.load(catalog, filename).get("entries", []))

    def load_all(self, catalog: CatalogType | str) -> list[tuple[str, dict[str, Any]]]:
        """Every entry of every listed file, as ``(filename, entry)`` pairs."""
        pairs: list[tuple[str, dict[str, Any]]] = []
        for name in self.list_files(catalog):
            pairs.extend((name, e) for e in self.load_entries(catalog, name))
        return pairs

    def _read_with_recovery(self, path: Path, catalog: str, filename: str) -> dict[str, Any]:
        try:
            return self._read_json(path)
        except ValueError as exc:
            backup = path.with_name(backup_name(path.name))
            logger.warning(
                "catalog_corrupt",
                catalog=catalog,
                filename=filename,
                error=str(exc),
                backup_exists=backup.is_file(),
            )
            if backup.is_file():
                try:
                    payload = self._read_json(backup)
                except ValueError as backup_exc:
                    raise FileReadError(
                        f"데이터 파일을 읽을 수 없습니다: {filename}",
                        recovered_from_backup=False,
                        cause=backup_exc,
                    ).with_context(catalog=catalog, filename=filename) from backup_exc
                with self.locks.locked(path):
                    shutil.copyfile(backup, path)
                logger.warning("catalog_restored_from_backup", catalog=catalog, filename=filename)
                return payload
            raise FileReadError(
                f"데이터 파일을 읽을 수 없습니다: {filename}",
                recovered_from_backup=False,
                cause=exc,
            ).with_context(catalog=catalog, filename=filename) from exc
        except OSError as exc:
            raise StorageError(f"데이터 파일 읽기 실패: {filename}", cause=exc).with_context(
                catalog=catalog, filename=filename
            ) from exc

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not isinstance(data.get("entries", []), list):
            raise ValueError("catalog payload must be an object with an 'entries' list")
        return data

    @staticmethod
    def _normalize(catalog: CatalogType, payload: dict[str, Any]) -> dict[str, Any]:
        entries = [e for e in payload.get("entries", []) if isinstance(e, dict)]
        payload["entries"] = entries
        payload["totalCount"] = len(entries)
        payload.setdefault("lastUpdated", now_iso())

        legacy = payload.pop("mappedDomainFile", None)
        if legacy:
            mapping = dict(payload.get("mapping") or {})
            mapping.setdefault("domain", legacy)
            payload["mapping"] = mapping
        if catalog in (CatalogType.VOCABULARY, CatalogType.TERM):
            mapping = dict(get_spec(catalog).default_mapping())
            mapping.update(payload.get("mapping") or {})
            payload["mapping"] = mapping
        return payload

    # ------------------------------------------------------------------ #
    # Save / merge
    # ------------------------------------------------------------------ #

    @contextmanager
    def mutation(self, catalog: CatalogType | str, filename: str | None = None) -> Iterator[Path]:
        """Serialize read-modify-write cycles on one catalog file within this process.

        Hold it from the ``load`` that reads the current entries until the
        ``save`` that writes them back. Re-entrant, so ``merge`` can be
        called inside it.
        """
        path = self.resolve_path(catalog, filename)
        with self._mutations_guard:
            lock = self._mutations.setdefault(path, threading.RLock())
        with lock:
            yield path

    def save(
        self,
        catalog: CatalogType | str,
        data: dict[str, Any],
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Persist a payload. Invalid entries are dropped with a warning."""
        spec = get_spec(catalog)
        name = validate_filename(filename or spec.default_filename)
        entries = data.get("entries") or []

        valid = [e for e in entries if spec.is_valid(e)]
        dropped = len(entries) - len(valid)
        if dropped:
            logger.warning(
                "invalid_entries_dropped",
                catalog=spec.type.value,
                filename=name,
                dropped=dropped,
            )
        if entries and not valid:
            raise ValidationError(f"저장할 유효한 {spec.label} 데이터가 없습니다.").with_context(
                catalog=spec.type.value, filename=name
            )

        payload = {k: v for k, v in data.items() if k not in ("entries", "lastUpdated", "totalCount")}
        payload = {"entries": valid, "lastUpdated": now_iso(), "totalCount": len(valid), **payload}

        path = self.resolve_path(spec.type, name)
        self._write(path, payload)
        self.cache.invalidate(spec.type.value, name)
        logger.info("catalog_saved", catalog=spec.type.value, filename=name, count=len(valid))
        return payload

    def merge(
        self,
        catalog: CatalogType | str,
        new_entries: Iterable[dict[str, Any]],
        *,
        replace: bool = True,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Merge entries into a file by merge key, or replace its entries."""
        spec = get_spec(catalog)
        incoming = list(new_entries)
        with self.mutation(spec.type, filename):
            current = self.load(spec.type, filename)
            existing = current.get("entries", [])

            if replace or not existing:
                merged = incoming
            else:
                now = now_iso()
                by_key: dict[str, dict[str, Any]] = {spec.merge_key(e): e for e in existing}
                for entry in incoming:
                    key = spec.merge_key(entry)
                    previous = by_key.get(key)
                    if previous is not None:
                        entry = {
                            **entry,
                            "id": previous.get("id", entry.get("id")),
                            "createdAt": previous.get("createdAt", entry.get("createdAt")),
                            "updatedAt": now,
                        }
                    by_key[key] = entry
                merged = list(by_key.values())

            logger.info(
                "catalog_merged",
                catalog=spec.type.value,
                filename=filename or spec.default_filename,
                incoming=len(incoming),
                replace=replace,
                total=len(merged),
            )
            return self.save(spec.type, {**current, "entries": merged}, filename)

    # ------------------------------------------------------------------ #
    # File management
    # ------------------------------------------------------------------ #

    def list_files(self, catalog: CatalogType | str) -> list[str]:
        directory = self.type_dir(catalog)
        if not directory.is_dir():
            return []
        return sorted(
            p.name
            for p in directory.glob("*.json")
            if p.name not in (HISTORY_FILENAME, FORBIDDEN_WORDS_FILENAME) and BACKUP_MARKER not in p.name
        )

    def create_file(self, catalog: CatalogType | str, filename: str) -> str:
        spec = get_spec(catalog)
        name = validate_filename(filename)
        path = self.resolve_path(spec.type, name)
        if path.exists():
            raise ConflictError("이미 존재하는 파일명입니다.").with_context(filename=name)
        self._write(path, spec.create_default())
        self.cache.invalidate(spec.type.value, name)
        logger.info("catalog_file_created", catalog=spec.type.value, filename=name)
        return name

    def rename_file(self, catalog: CatalogType | str, old: str, new: str) -> str:
        spec = get_spec(catalog)
        old_name = validate_filename(old)
        new_name = validate_filename(new)
        if self.is_protected(spec.type, old_name):
            raise ValidationError("시스템 파일은 이름을 변경할 수 없습니다.").with_context(filename=old_name)

        old_path = self.resolve_path(spec.type, old_name)
        new_path = self.resolve_path(spec.type, new_name)
        if not old_path.is_file():
            raise NotFoundError("파일을 찾을 수 없습니다.").with_context(filename=old_name)
        if new_path.exists():
            raise ConflictError("이미 존재하는 파일명입니다.").with_context(filename=new_name)

        with self.locks.locked(old_path):
            os.replace(old_path, new_path)
            old_backup = old_path.with_name(backup_name(old_name))
            if old_backup.is_file():
                os.replace(old_backup, new_path.with_name(backup_name(new_name)))

        self.cache.invalidate(spec.type.value, old_name)
        self.cache.invalidate(spec.type.value, new_name)
        updated = self._rewrite_mappings(spec.type, old_name, new_name)
        logger.info(
            "catalog_file_renamed",
            catalog=spec.type.value,
            old=old_name,
            new=new_name,
            mappings_updated=updated,
        )
        return new_name

    def delete_file(self, catalog: CatalogType | str, filename: str) -> None:
        spec = get_spec(catalog)
        name = validate_filename(filename)
        if self.is_protected(spec.type, name):
            raise ValidationError("시스템 파일은 삭제할 수 없습니다.").with_context(filename=name)

        path = self.resolve_path(spec.type, name)
        if not path.is_file():
            raise NotFoundError("파일을 찾을 수 없습니다.").with_context(filename=name)

        with self.locks.locked(path):
            path.unlink()
            backup = path.with_name(backup_name(name))
            if backup.is_file():
                backup.unlink()

        self.cache.invalidate(spec.type.value, name)
        updated = self._rewrite_mappings(spec.type, name, spec.default_filename)
        logger.info("catalog_file_deleted", catalog=spec.type.value, filename=name, mappings_updated=updated)

    def is_protected(self, catalog: CatalogType | str, filename: str) -> bool:
        return filename in PROTECTED_FILENAMES or filename == get_spec(catalog).default_filename

    # ------------------------------------------------------------------ #
    # Mappings
    # ------------------------------------------------------------------ #

    def get_mapping(self, catalog: CatalogType | str, filename: str | None = None) -> dict[str, str]:
        """Resolved mapping of a file: stored values over defaults."""
        spec = get_spec(catalog)
        mapping = spec.default_mapping()
        stored = self.load(spec.type, filename).get("mapping") or {}
        mapping.update({k: v for k, v in stored.items() if isinstance(v, str) and v.strip()})
        return mapping

    def set_mapping(
        self,
        catalog: CatalogType | str,
        mapping: dict[str, str],
        filename: str | None = None,
    ) -> dict[str, str]:
        spec = get_spec(catalog)
        allowed = {t.value for t in spec.related}
        unknown = set(mapping) - allowed
        if unknown:
            raise ValidationError(
                f"{spec.label} 파일에 허용되지 않는 매핑입니다: {', '.join(sorted(unknown))}"
            )
        clean = {k: validate_filename(v) for k, v in mapping.items()}
        with self.mutation(spec.type, filename):
            data = self.load(spec.type, filename)
            data["mapping"] = {**(data.get("mapping") or {}), **clean}
            self.save(spec.type, data, filename)
        return self.get_mapping(spec.type, filename)

    def resolve_related(
        self,
        catalog: CatalogType | str,
        filename: str | None,
        related: CatalogType | str,
        explicit: str | None = None,
    ) -> str:
        """Resolve a related filename: explicit, then stored mapping, then default."""
        related_spec = get_spec(related)
        if explicit and explicit.strip():
            return validate_filename(explicit)
        stored = (self.load(catalog, filename).get("mapping") or {}).get(related_spec.type.value)
        if isinstance(stored, str) and stored.strip():
            return stored
        return related_spec.default_filename

    def _rewrite_mappings(self, target: CatalogType, old: str, new: str) -> int:
        count = 0
        for owner, spec in CATALOGS.items():
            if target not in spec.related:
                continue
            for name in self.list_files(owner):
                data = self.load(owner, name)
                mapping = data.get("mapping") or {}
                if mapping.get(target.value) == old:
                    data["mapping"] = {**mapping, target.value: new}
                    self.save(owner, data, name)
                    count += 1
        return count

    # ------------------------------------------------------------------ #
    # Raw JSON documents (history, forbidden words)
    # ------------------------------------------------------------------ #

    def read_document(self, path: Path) -> dict[str, Any] | None:
        if not path.is_file() or path.stat().st_size == 0:
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise FileReadError(f"데이터 파일을 읽을 수 없습니다: {path.name}", cause=exc) from exc
        return data if isinstance(data, dict) else None

    def write_document(self, path: Path, payload: dict[str, Any]) -> None:
        self._write(path, payload, keep_backup=False)

    def load_forbidden_words(self) -> list[dict[str, Any]]:
        """Entries of ``vocabulary/forbidden-words.json``; empty when the file is absent."""
        data = self.read_document(self.type_dir(CatalogType.VOCABULARY) / FORBIDDEN_WORDS_FILENAME) or {}
        return [e for e in data.get("entries") or [] if isinstance(e, dict)]

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def _write(self, path: Path, payload: dict[str, Any], *, keep_backup: bool = True) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        with self.locks.locked(path):
            if keep_backup and path.is_file() and path.stat().st_size > 0:
                self._refresh_backup(path)
            tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
            try:
                tmp.write_text(text, encoding="utf-8")
                os.replace(tmp, path)
            except OSError as exc:
                tmp.unlink(missing_ok=True)
                raise StorageError(f"데이터 파일 저장 실패: {path.name}", cause=exc).with_context(
                    path=str(path)
                ) from exc

    def _refresh_backup(self, path: Path) -> None:
        """Copy the current primary to the backup slot if it parses."""
        try:
            self._read_json(path)
        except ValueError:
            logger.warning("backup_skipped_corrupt_primary", path=str(path))
            return
        shutil.copyfile(path, path.with_name(backup_name(path.name)))
