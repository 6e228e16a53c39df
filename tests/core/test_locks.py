"""Tests for metacat.core.locks — FileLockManager."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import pytest

from metacat.core.errors import LockTimeoutError
from metacat.core.locks import FileLockManager


@pytest.fixture()
def target(tmp_path: Path) -> Path:
    return tmp_path / "term.json"


class TestFileLockManager:
    def test_acquire_writes_sentinel(self, target: Path):
        locks = FileLockManager()
        handle = locks.acquire(target)
        sentinel = json.loads(FileLockManager.lock_path(target).read_text(encoding="utf-8"))
        assert sentinel["owner"] == handle.owner
        assert locks.is_locked(target)
        locks.release(handle)
        assert not FileLockManager.lock_path(target).exists()
        assert not locks.is_locked(target)

    def test_context_manager_releases_on_error(self, target: Path):
        locks = FileLockManager()
        with pytest.raises(RuntimeError):
            with locks.locked(target):
                raise RuntimeError("boom")
        assert not locks.is_locked(target)

    def test_second_acquire_times_out(self, target: Path):
        locks = FileLockManager(retry_interval_ms=10)
        with locks.locked(target):
            with pytest.raises(LockTimeoutError) as info:
                locks.acquire(target, timeout=0.05)
        assert info.value.retryable is True

    def test_retries_exhausted(self, target: Path):
        locks = FileLockManager(retry_interval_ms=1, max_retries=3)
        with locks.locked(target):
            with pytest.raises(LockTimeoutError):
                locks.acquire(target, timeout=10)

    def test_foreign_sentinel_blocks(self, target: Path):
        FileLockManager.lock_path(target).write_text(
            json.dumps({"owner": "other", "acquiredAt": int(time.time() * 1000), "pid": 1}),
            encoding="utf-8",
        )
        locks = FileLockManager(retry_interval_ms=10)
        with pytest.raises(LockTimeoutError):
            locks.acquire(target, timeout=0.05)

    def test_stale_sentinel_taken_over(self, target: Path):
        FileLockManager.lock_path(target).write_text(
            json.dumps({"owner": "ghost", "acquiredAt": 0, "pid": 1}),
            encoding="utf-8",
        )
        locks = FileLockManager(stale_seconds=1)
        with locks.locked(target, timeout=1) as handle:
            assert handle.owner != "ghost"

    def test_garbage_sentinel_is_stale(self, target: Path):
        FileLockManager.lock_path(target).write_text("not-json", encoding="utf-8")
        locks = FileLockManager()
        with locks.locked(target, timeout=1):
            pass

    def test_release_keeps_foreign_sentinel(self, target: Path):
        locks = FileLockManager()
        handle = locks.acquire(target)
        FileLockManager.lock_path(target).write_text(
            json.dumps({"owner": "someone-else", "acquiredAt": int(time.time() * 1000)}),
            encoding="utf-8",
        )
        locks.release(handle)
        assert FileLockManager.lock_path(target).exists()

    def test_threads_serialize(self, target: Path):
        locks = FileLockManager(retry_interval_ms=1, max_retries=10_000)
        inside = []
        overlaps = []

        def worker() -> None:
            with locks.locked(target, timeout=5):
                if inside:
                    overlaps.append(True)
                inside.append(True)
                time.sleep(0.005)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []
