from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from booking_app.application.ports.appointment_store import SnapshotCallback, Unsubscribe
from booking_app.domain.entities.appointment import Appointment

logger = logging.getLogger(__name__)

RowsFactory = Callable[[], list[Appointment]]


class LiveQueryHub:
    """Snapshot subscriptions keyed by query value ("day:2026-03-02", "user:u1").

    Each key has its own publish lock, held while the snapshot is read and
    delivered. Snapshots for a key therefore reach listeners in the order they
    were read, and the initial snapshot of a new subscription cannot overtake
    a newer one.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[SnapshotCallback]] = {}
        self._publish_locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def subscribe(self, key: str, callback: SnapshotCallback, initial: RowsFactory) -> Unsubscribe:
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)
            publish_lock = self._publish_locks.setdefault(key, threading.RLock())
        with publish_lock:
            self._deliver(key, callback, initial())

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(key, None)
                    self._publish_locks.pop(key, None)

        return unsubscribe

    def publish(self, key: str, rows: RowsFactory) -> None:
        """Read a fresh snapshot with ``rows`` and send it to every listener of ``key``.

        The read is skipped when nobody listens.
        """
        with self._lock:
            publish_lock = self._publish_locks.get(key)
        if publish_lock is None:
            return
        with publish_lock:
            with self._lock:
                callbacks = list(self._subscribers.get(key, []))
            if not callbacks:
                return
            snapshot = rows()
            for callback in callbacks:
                self._deliver(key, callback, snapshot)

    def _deliver(self, key: str, callback: SnapshotCallback, rows: list[Appointment]) -> None:
        try:
            callback({row.id: row for row in rows})
        except Exception as e:
            # A broken listener must not fail the write that triggered it.
            logger.exception("Live query listener failed", extra={"query": key, "error": str(e)})
