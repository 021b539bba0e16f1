"""
Tests for repository locks and cancellation tokens.
"""

from __future__ import annotations

import gc
import threading
import time
from pathlib import Path

import pytest

from gitsync.core.sync.cancellation import CancellationToken
from gitsync.core.sync.errors import GitTimeoutError, OperationCancelledError
from gitsync.core.sync.locks import ReadWriteLock, RepositoryLockRegistry


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestReadWriteLock:
    """Tests for ReadWriteLock."""

    def test_readers_share(self) -> None:
        lock = ReadWriteLock()
        lock.acquire_read()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read():
                acquired.set()

        thread = threading.Thread(target=reader)
        thread.start()
        thread.join(timeout=2)
        lock.release_read()

        assert acquired.is_set()

    def test_writer_excludes_readers(self) -> None:
        lock = ReadWriteLock()
        lock.acquire_write()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read():
                acquired.set()

        thread = threading.Thread(target=reader)
        thread.start()
        assert not acquired.wait(timeout=0.1)

        lock.release_write()
        thread.join(timeout=2)
        assert acquired.is_set()

    def test_waiting_writer_blocks_new_readers(self) -> None:
        lock = ReadWriteLock()
        lock.acquire_read()
        order: list[str] = []

        def writer() -> None:
            with lock.write():
                order.append("writer")

        def late_reader() -> None:
            with lock.read():
                order.append("reader")

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        assert _wait_for(lambda: lock._waiting_writers == 1)

        reader_thread = threading.Thread(target=late_reader)
        reader_thread.start()
        time.sleep(0.05)
        assert order == []

        lock.release_read()
        writer_thread.join(timeout=2)
        reader_thread.join(timeout=2)

        assert order == ["writer", "reader"]

    def test_release_without_acquire(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_released_on_exception(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write():
                raise ValueError("boom")

        # Would block forever if the write side were still held
        with lock.read():
            pass


class TestRepositoryLockRegistry:
    """Tests for RepositoryLockRegistry."""

    def test_same_path_same_lock(self, tmp_path: Path) -> None:
        registry = RepositoryLockRegistry()
        (tmp_path / "repo").mkdir()

        first = registry.lock_for(tmp_path / "repo")
        second = registry.lock_for(str(tmp_path / "repo" / ".." / "repo"))

        assert first is second

    def test_unused_locks_are_dropped(self, tmp_path: Path) -> None:
        registry = RepositoryLockRegistry()

        for i in range(50):
            with registry.exclusive(tmp_path / f"repo-{i}"):
                pass
        gc.collect()

        assert len(registry._locks) == 0

    def test_held_lock_is_kept(self, tmp_path: Path) -> None:
        registry = RepositoryLockRegistry()

        with registry.shared(tmp_path):
            gc.collect()
            assert registry.lock_for(tmp_path)._readers == 1

    def test_different_paths_do_not_contend(self, tmp_path: Path) -> None:
        registry = RepositoryLockRegistry()
        done = threading.Event()

        def other_repo() -> None:
            with registry.exclusive(tmp_path / "two"):
                done.set()

        with registry.exclusive(tmp_path / "one"):
            thread = threading.Thread(target=other_repo)
            thread.start()
            assert done.wait(timeout=2)
        thread.join(timeout=2)

    def test_exclusive_serializes_writers(self, tmp_path: Path) -> None:
        registry = RepositoryLockRegistry()
        active = 0
        peak = 0
        guard = threading.Lock()

        def work() -> None:
            nonlocal active, peak
            with registry.exclusive(tmp_path):
                with guard:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.01)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=work) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert peak == 1


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_fresh_token_passes(self) -> None:
        token = CancellationToken()
        token.check("fetch")
        assert token.remaining() is None
        assert token.expired is False

    def test_cancel(self) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            token.check("fetch")
        assert exc_info.value.operation == "fetch"

    def test_expired_deadline(self) -> None:
        token = CancellationToken(timeout=0)

        with pytest.raises(GitTimeoutError):
            token.check("merge")

    def test_cancel_wins_over_deadline(self) -> None:
        token = CancellationToken(timeout=0)
        token.cancel()

        with pytest.raises(OperationCancelledError):
            token.check("merge")

    def test_bound(self) -> None:
        assert CancellationToken().bound(120) == 120
        assert CancellationToken().bound(None) is None

        token = CancellationToken(timeout=30)
        assert token.bound(120) <= 30
        assert token.bound(5) == 5
        assert token.bound(None) <= 30

    def test_cancel_from_another_thread(self) -> None:
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join(timeout=2)

        assert token.cancelled is True
