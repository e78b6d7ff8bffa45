from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from booking_app.application.exceptions import StoreUnavailable


class KeyedLocks:
    """One lock per key (day key), acquired with a timeout.

    A key's lock lives only while some caller holds or waits for it.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._timeout = timeout_seconds
        self._locks: dict[str, tuple[threading.Lock, int]] = {}
        self._lock_lock = threading.Lock()  # guards the locks dict

    def __len__(self) -> int:
        with self._lock_lock:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.Lock:
        with self._lock_lock:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, users + 1)
            return lock

    def _checkin(self, key: str) -> None:
        with self._lock_lock:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        # Sorted acquisition order so two multi-day writers cannot deadlock.
        checked_out: list[str] = []
        acquired: list[threading.Lock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._checkout(key)
                checked_out.append(key)
                if not lock.acquire(timeout=self._timeout):
                    raise StoreUnavailable(f"Timed out waiting for store lock on {key}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in checked_out:
                self._checkin(key)
