from __future__ import annotations

import logging

from booking_app.application.ports.notifier import NotificationPort
from booking_app.domain.entities.appointment import Appointment
from booking_app.domain.entities.event import AppointmentEvent


class LoggingNotifier(NotificationPort):
    """Stands in for push/inbox delivery: records the event in the log."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def publish(self, event: AppointmentEvent, appointment: Appointment) -> None:
        self._logger.info(
            "Appointment event",
            extra={
                "event": event.type,
                "appointment_id": event.appointment_id,
                "user_id": appointment.user_id,
                "status": appointment.status.value,
            },
        )
