"""Locks for serializing aggregate read-modify-write.

``ItemLocks`` orders threads of one process per item. ``hold_file_lock``
orders every writer of a data file, across threads and processes alike;
the in-process lock is always taken first.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import Iterator

from filelock import FileLock, Timeout

from stockledger.domain.exceptions import StorageUnavailable


class ItemLocks:
    """One lock per item id, created on first use.

    Thread-safe; the registry itself is guarded by its own lock.
    """

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = {}
        self._guard = Lock()

    def _lock_for(self, item_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(item_id)
            if lock is None:
                lock = self._locks[item_id] = Lock()
            return lock

    @contextmanager
    def hold(self, item_id: str, timeout: float) -> Iterator[None]:
        lock = self._lock_for(item_id)
        if not lock.acquire(timeout=max(timeout, 0)):
            raise StorageUnavailable(
                f"Timed out after {timeout}s waiting for item '{item_id}'"
            )
        try:
            yield
        finally:
            lock.release()


def file_lock_for(data_file: Path) -> FileLock:
    """Sidecar ``<name>.lock`` next to *data_file*.

    Re-entrant within a thread; two threads (or processes) holding
    separate handles on the same path exclude each other.
    """
    return FileLock(str(data_file) + ".lock", thread_local=True)


@contextmanager
def hold_file_lock(lock: FileLock, timeout: float) -> Iterator[None]:
    try:
        lock.acquire(timeout=max(timeout, 0))
    except Timeout:
        raise StorageUnavailable(
            f"Timed out after {timeout:.2f}s waiting for {lock.lock_file}"
        ) from None
    try:
        yield
    finally:
        lock.release()
