from __future__ import annotations

import logging
import threading
from datetime import datetime

from booking_app.application.exceptions import AppointmentNotFound, IllegalTransitionError
from booking_app.application.ports.appointment_store import (
    AppointmentStorePort,
    ConflictCheck,
    SnapshotCallback,
    Unsubscribe,
)
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.infrastructure.store.live_query import LiveQueryHub
from booking_app.infrastructure.store.locks import KeyedLocks


class MemoryAppointmentStore(AppointmentStorePort):
    def __init__(self, lock_timeout_seconds: float = 5.0) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._rows_lock = threading.Lock()
        self._day_locks = KeyedLocks(lock_timeout_seconds)
        self._live = LiveQueryHub()
        self._logger = logging.getLogger(__name__)

    def get(self, appointment_id: str) -> Appointment | None:
        with self._rows_lock:
            return self._appointments.get(appointment_id)

    def list_by_day(self, day_key: str) -> list[Appointment]:
        with self._rows_lock:
            rows = [a for a in self._appointments.values() if a.day_key == day_key]
        return sorted(rows, key=lambda a: a.authoritative_start)

    def list_by_user(self, user_id: str) -> list[Appointment]:
        with self._rows_lock:
            rows = [a for a in self._appointments.values() if a.user_id == user_id]
        return sorted(rows, key=lambda a: a.authoritative_start)

    def list_due_for_expiry(self, now: datetime) -> list[Appointment]:
        with self._rows_lock:
            return [
                a
                for a in self._appointments.values()
                if a.status == AppointmentStatus.awaiting_payment
                and a.payment_due_at is not None
                and a.payment_due_at <= now
            ]

    def insert_if_free(self, appointment: Appointment, check: ConflictCheck) -> Appointment:
        with self._day_locks.hold(appointment.day_key):
            check(self.list_by_day(appointment.day_key))
            with self._rows_lock:
                if appointment.id in self._appointments:
                    raise ValueError(f"Appointment {appointment.id} already exists")
                self._appointments[appointment.id] = appointment
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
        with self._rows_lock:
            current = self._appointments.get(appointment.id)
            if current is None:
                raise AppointmentNotFound(appointment.id)
            if current.status != expected_status:
                raise IllegalTransitionError(
                    appointment.id, current.status.value, f"update (expected {expected_status.value})"
                )
            self._appointments[appointment.id] = appointment
            return current

    def _notify(self, appointment: Appointment, previous: Appointment | None) -> None:
        day_keys = {appointment.day_key}
        if previous is not None:
            day_keys.add(previous.day_key)
        for day_key in sorted(day_keys):
            self._live.publish(f"day:{day_key}", lambda: self.list_by_day(day_key))
        self._live.publish(f"user:{appointment.user_id}", lambda: self.list_by_user(appointment.user_id))
