"""
Per-repository reader/writer locks.

Mutating workflows (push, pull, conflict resolution, checkout) hold a
repository's exclusive lock for their whole duration; read-only queries
share it. Locks are keyed by resolved path, so different working copies
never contend.
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


class ReadWriteLock:
    """
    Writer-preferring reader/writer lock.

    A waiting writer blocks new readers so a steady stream of status
    calls cannot starve a pull. Not re-entrant: a thread holding either
    side must not acquire again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a matching acquire")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class RepositoryLockRegistry:
    """
    Hands out one ReadWriteLock per repository path.

    Locks are held weakly: once no thread holds or waits on a path's lock
    its entry is dropped, so a long-running server does not accumulate one
    lock per path it has ever seen.

    Example:
        >>> registry = RepositoryLockRegistry()
        >>> with registry.exclusive(Path("/srv/checkout")):
        ...     ...  # push or pull
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[Path, ReadWriteLock] = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def lock_for(self, path: Path | str) -> ReadWriteLock:
        key = Path(path).expanduser().resolve()
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = ReadWriteLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def shared(self, path: Path | str) -> Iterator[None]:
        lock = self.lock_for(path)
        with lock.read():
            yield

    @contextmanager
    def exclusive(self, path: Path | str) -> Iterator[None]:
        lock = self.lock_for(path)
        with lock.write():
            yield


# Shared by every orchestrator in the process so CLI-in-process and API
# callers serialize on the same paths.
default_registry = RepositoryLockRegistry()
