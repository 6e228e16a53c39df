"""
File locks for catalog writes.

Every catalog save runs inside one lock held on the target file. The lock
is two-level:

* an in-process table of held paths (threads of the same server), and
* a sentinel ``<path>.lock`` file created exclusively, holding
  ``{owner, acquiredAt, pid}`` (separate processes, e.g. CLI + server).

A sentinel older than the stale threshold is considered abandoned and is
taken over. The manager is injectable: the store only depends on the
:class:`LockManager` protocol.

Examples:
    >>> locks = FileLockManager(timeout_seconds=5)
    >>> with locks.locked(path):
    ...     write_file(path)
"""

from __future__ import annotations

import json
import os
import secrets
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from metacat.core.errors import LockTimeoutError
from metacat.core.logging import get_logger

logger = get_logger(__name__)

LOCK_SUFFIX = ".lock"


@dataclass(frozen=True, slots=True)
class LockHandle:
    """A held lock. Pass it back to :meth:`LockManager.release`."""

    path: Path
    owner: str
    acquired_at_ms: int


class LockManager(Protocol):
    """Contract for lock managers used by the catalog store."""

    def acquire(self, path: Path, timeout: float | None = None) -> LockHandle:
        """Block until ``path`` is locked; raise :class:`LockTimeoutError`."""
        ...

    def release(self, handle: LockHandle) -> None:
        """Release a previously acquired lock."""
        ...

    def locked(self, path: Path, timeout: float | None = None):
        """Context manager around acquire/release."""
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_owner() -> str:
    return f"{os.getpid()}-{_now_ms()}-{secrets.token_hex(4)}"


class FileLockManager:
    """Sentinel-file lock manager with stale takeover."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        stale_seconds: float = 60.0,
        retry_interval_ms: int = 100,
        max_retries: int = 300,
    ):
        self.timeout_seconds = timeout_seconds
        self.stale_seconds = stale_seconds
        self.retry_interval_ms = retry_interval_ms
        self.max_retries = max_retries
        self._held: dict[str, str] = {}
        self._mutex = threading.Lock()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def acquire(self, path: Path, timeout: float | None = None) -> LockHandle:
        timeout = self.timeout_seconds if timeout is None else timeout
        lock_path = self.lock_path(path)
        key = str(lock_path)
        owner = _new_owner()
        deadline = time.monotonic() + timeout
        attempts = 0

        while True:
            if time.monotonic() > deadline:
                logger.warning("lock_timeout", path=str(path), attempts=attempts)
                raise LockTimeoutError(f"파일 락 획득 타임아웃: {path}").with_context(
                    path=str(path), attempts=attempts
                )
            if attempts >= self.max_retries:
                logger.warning("lock_retries_exhausted", path=str(path), attempts=attempts)
                raise LockTimeoutError(
                    f"파일 락 획득 실패 (최대 재시도 횟수 초과): {path}"
                ).with_context(path=str(path), attempts=attempts)

            attempts += 1
            if self._try_acquire(key, lock_path, owner):
                logger.debug("lock_acquired", path=str(path), owner=owner, attempts=attempts)
                return LockHandle(path=lock_path, owner=owner, acquired_at_ms=_now_ms())

            time.sleep(self.retry_interval_ms / 1000)

    def release(self, handle: LockHandle) -> None:
        key = str(handle.path)
        with self._mutex:
            if self._held.get(key) == handle.owner:
                del self._held[key]

        # Only remove the sentinel if it is still ours.
        current = self._read_sentinel(handle.path)
        if current is not None and current.get("owner") == handle.owner:
            handle.path.unlink(missing_ok=True)
        logger.debug("lock_released", path=str(handle.path), owner=handle.owner)

    @contextmanager
    def locked(self, path: Path, timeout: float | None = None) -> Iterator[LockHandle]:
        handle = self.acquire(path, timeout)
        try:
            yield handle
        finally:
            self.release(handle)

    @staticmethod
    def lock_path(path: Path) -> Path:
        return path.with_name(path.name + LOCK_SUFFIX)

    def is_locked(self, path: Path) -> bool:
        lock_path = self.lock_path(path)
        with self._mutex:
            if str(lock_path) in self._held:
                return True
        sentinel = self._read_sentinel(lock_path)
        return sentinel is not None and not self._is_stale(sentinel)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _try_acquire(self, key: str, lock_path: Path, owner: str) -> bool:
        with self._mutex:
            if key in self._held:
                return False

            sentinel = self._read_sentinel(lock_path)
            if sentinel is not None:
                if not self._is_stale(sentinel):
                    return False
                logger.warning(
                    "stale_lock_taken_over",
                    path=str(lock_path),
                    previous_owner=sentinel.get("owner"),
                )
                lock_path.unlink(missing_ok=True)

            payload = json.dumps({"owner": owner, "acquiredAt": _now_ms(), "pid": os.getpid()})
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                with open(lock_path, "x", encoding="utf-8") as fh:
                    fh.write(payload)
            except FileExistsError:
                return False

            self._held[key] = owner
            return True

    def _is_stale(self, sentinel: dict) -> bool:
        acquired = sentinel.get("acquiredAt")
        if not isinstance(acquired, int | float):
            return True
        return (_now_ms() - acquired) > self.stale_seconds * 1000

    @staticmethod
    def _read_sentinel(lock_path: Path) -> dict | None:
        try:
            raw = lock_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            # Half-written or foreign sentinel: treat as stale.
            return {"acquiredAt": None}
        return data if isinstance(data, dict) else {"acquiredAt": None}
