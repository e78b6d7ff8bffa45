from __future__ import annotations

import logging
from datetime import datetime

from booking_app.application.exceptions import IllegalTransitionError, StoreUnavailable
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.ports.notifier import NotificationPort
from booking_app.application.scheduling import state_machine
from booking_app.application.scheduling.timezone import utc_now
from booking_app.application.use_cases.publish import publish_event
from booking_app.domain.entities.appointment import AppointmentStatus


class ExpireUnpaidAppointmentsUseCase:
    """
    Scheduled sweep: awaiting_payment appointments past paymentDueAt become expired.

    Runs actively (not on read) so the blocking set seen by the conflict
    detector follows wall-clock time. Safe to replay.
    """

    def __init__(self, appointments: AppointmentStorePort, notifier: NotificationPort | None = None) -> None:
        self._appointments = appointments
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    def execute(self, now: datetime | None = None) -> int:
        now = now or utc_now()
        due = self._appointments.list_due_for_expiry(now)
        expired_count = 0

        for appointment in due:
            try:
                result = state_machine.expire(appointment, now)
                if not result.changed:
                    continue
                self._appointments.update(result.appointment, expected_status=AppointmentStatus.awaiting_payment)
            except IllegalTransitionError as e:
                # Paid or cancelled between the query and the write.
                self._logger.info(
                    "Skipped expiry", extra={"appointment_id": appointment.id, "reason": str(e)}
                )
                continue
            except StoreUnavailable as e:
                self._logger.error(
                    "Failed to expire appointment", extra={"appointment_id": appointment.id, "error": str(e)}
                )
                continue

            expired_count += 1
            self._logger.info(
                "Appointment expired",
                extra={"appointment_id": appointment.id, "day_key": appointment.day_key},
            )
            publish_event(self._notifier, result)

        if expired_count > 0:
            self._logger.info(f"expire_unpaid: {expired_count} appointments expired")
        return expired_count
