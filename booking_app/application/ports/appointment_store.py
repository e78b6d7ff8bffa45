from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from booking_app.domain.entities.appointment import Appointment, AppointmentStatus

# Receives the whole live result set (id -> Appointment) after every change.
SnapshotCallback = Callable[[dict[str, Appointment]], None]
# Raises ConflictError when the candidate collides with the day's appointments.
ConflictCheck = Callable[[list[Appointment]], None]
Unsubscribe = Callable[[], None]


class AppointmentStorePort(ABC):
    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def list_by_day(self, day_key: str) -> list[Appointment]:
        raise NotImplementedError

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Appointment]:
        raise NotImplementedError

    @abstractmethod
    def list_due_for_expiry(self, now: datetime) -> list[Appointment]:
        """Appointments awaiting payment whose payment deadline is at or before `now`."""
        raise NotImplementedError

    @abstractmethod
    def insert_if_free(self, appointment: Appointment, check: ConflictCheck) -> Appointment:
        """
        Run `check` against the appointments of appointment.day_key and insert,
        both under the same per-day lock. Nothing is written if `check` raises.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, appointment: Appointment, expected_status: AppointmentStatus) -> Appointment:
        """
        Replace the stored document if its status is still `expected_status`.
        Raises IllegalTransitionError when another writer got there first.
        """
        raise NotImplementedError

    @abstractmethod
    def update_if_free(
        self,
        appointment: Appointment,
        expected_status: AppointmentStatus,
        check: ConflictCheck,
    ) -> Appointment:
        """Like update(), re-validating conflicts on the target day under the day lock."""
        raise NotImplementedError

    @abstractmethod
    def subscribe_day(self, day_key: str, callback: SnapshotCallback) -> Unsubscribe:
        raise NotImplementedError

    @abstractmethod
    def subscribe_user(self, user_id: str, callback: SnapshotCallback) -> Unsubscribe:
        raise NotImplementedError
