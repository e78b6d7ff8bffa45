from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from booking_app.application.exceptions import AppointmentNotFound, IllegalTransitionError, StoreUnavailable
from booking_app.application.ports.appointment_store import (
    AppointmentStorePort,
    ConflictCheck,
    SnapshotCallback,
    Unsubscribe,
)
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.infrastructure.store.documents import appointment_from_document, appointment_to_document
from booking_app.infrastructure.store.live_query import LiveQueryHub
from booking_app.infrastructure.store.locks import KeyedLocks


def write_json_atomic(file_path: Path, data: dict[str, Any]) -> None:
    """Write JSON to a temp file and rename it over the target."""
    temp_path = file_path.with_suffix(".json.tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path.replace(file_path)
    except OSError as e:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise StoreUnavailable(f"Could not write {file_path.name}: {e}") from e


def read_json(file_path: Path) -> dict[str, Any] | None:
    if not file_path.exists():
        return None
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StoreUnavailable(f"Corrupted document {file_path.name}: {e}") from e
    except OSError as e:
        raise StoreUnavailable(f"Could not read {file_path.name}: {e}") from e


class JsonAppointmentStore(AppointmentStorePort):
    """One JSON document per appointment under data_dir/appointments."""

    def __init__(self, data_dir: str = "./data", lock_timeout_seconds: float = 5.0) -> None:
        self._data_dir = Path(data_dir) / "appointments"
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._day_locks = KeyedLocks(lock_timeout_seconds)
        self._io_lock = threading.Lock()
        self._live = LiveQueryHub()
        self._logger = logging.getLogger(__name__)

    def _get_file_path(self, appointment_id: str) -> Path:
        return self._data_dir / f"{appointment_id}.json"

    def _load(self, appointment_id: str) -> Appointment | None:
        data = read_json(self._get_file_path(appointment_id))
        return appointment_from_document(data) if data else None

    def _load_all(self) -> list[Appointment]:
        # Full scan; fine for a single provider calendar.
        rows: list[Appointment] = []
        with self._io_lock:
            try:
                files = sorted(self._data_dir.glob("*.json"))
            except OSError as e:
                raise StoreUnavailable(f"Could not list appointments: {e}") from e
            for file_path in files:
                data = read_json(file_path)
                if data:
                    rows.append(appointment_from_document(data))
        return rows

    def _save(self, appointment: Appointment) -> None:
        with self._io_lock:
            write_json_atomic(self._get_file_path(appointment.id), appointment_to_document(appointment))

    def get(self, appointment_id: str) -> Appointment | None:
        with self._io_lock:
            return self._load(appointment_id)

    def list_by_day(self, day_key: str) -> list[Appointment]:
        rows = [a for a in self._load_all() if a.day_key == day_key]
        return sorted(rows, key=lambda a: a.authoritative_start)

    def list_by_user(self, user_id: str) -> list[Appointment]:
        rows = [a for a in self._load_all() if a.user_id == user_id]
        return sorted(rows, key=lambda a: a.authoritative_start)

    def list_due_for_expiry(self, now: datetime) -> list[Appointment]:
        return [
            a
            for a in self._load_all()
            if a.status == AppointmentStatus.awaiting_payment
            and a.payment_due_at is not None
            and a.payment_due_at <= now
        ]

    def insert_if_free(self, appointment: Appointment, check: ConflictCheck) -> Appointment:
        with self._day_locks.hold(appointment.day_key):
            check(self.list_by_day(appointment.day_key))
            if self._get_file_path(appointment.id).exists():
                raise ValueError(f"Appointment {appointment.id} already exists")
            self._save(appointment)
        self._logger.info(
            "Appointment stored",
            extra={"appointment_id": appointment.id, "day_key": appointment.day_key, "status": appointment.status.value},
        )
        self._notify(appointment, None)
        return appointment

    def update(self, appointment: Appointment, expected_status: AppointmentStatus) -> Appointment:
        previous = self.get(appointment.id)
        day_keys = [appointment.day_key] + ([previous.day_key] if previous else [])
        with self._day_locks.hold(*day_keys):
            previous = self._replace(appointment, expected_status)
        self._notify(appointment, previous)
        return appointment

    def update_if_free(
        self,
        appointment: Appointment,
        expected_status: AppointmentStatus,
        check: ConflictCheck,
    ) -> Appointment:
        previous = self.get(appointment.id)
        day_keys = [appointment.day_key] + ([previous.day_key] if previous else [])
        with self._day_locks.hold(*day_keys):
            check(self.list_by_day(appointment.day_key))
            previous = self._replace(appointment, expected_status)
        self._notify(appointment, previous)
        return appointment

    def subscribe_day(self, day_key: str, callback: SnapshotCallback) -> Unsubscribe:
        return self._live.subscribe(f"day:{day_key}", callback, lambda: self.list_by_day(day_key))

    def subscribe_user(self, user_id: str, callback: SnapshotCallback) -> Unsubscribe:
        return self._live.subscribe(f"user:{user_id}", callback, lambda: self.list_by_user(user_id))

    def _replace(self, appointment: Appointment, expected_status: AppointmentStatus) -> Appointment:
        current = self.get(appointment.id)
        if current is None:
            raise AppointmentNotFound(appointment.id)
        if current.status != expected_status:
            raise IllegalTransitionError(
                appointment.id, current.status.value, f"update (expected {expected_status.value})"
            )
        self._save(appointment)
        return current

    def _notify(self, appointment: Appointment, previous: Appointment | None) -> None:
        day_keys = {appointment.day_key}
        if previous is not None:
            day_keys.add(previous.day_key)
        for day_key in sorted(day_keys):
            self._live.publish(f"day:{day_key}", lambda: self.list_by_day(day_key))
        self._live.publish(f"user:{appointment.user_id}", lambda: self.list_by_user(appointment.user_id))
