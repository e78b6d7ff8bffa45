from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from booking_app.application.exceptions import ConflictError, PolicyRejection, ServiceNotFound
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.ports.notifier import NotificationPort
from booking_app.application.ports.service_catalog import ServiceCatalogPort
from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.application.scheduling.business_hours import window_for
from booking_app.application.scheduling.conflicts import ensure_no_conflict
from booking_app.application.scheduling.policy import check_booking_policy
from booking_app.application.scheduling.slots import generate_slots
from booking_app.application.scheduling.state_machine import TransitionResult
from booking_app.application.scheduling.timezone import day_key_of, format_hhmm, minute_of_day, resolve_timezone, utc_now
from booking_app.application.use_cases.provider_settings import require_settings
from booking_app.application.use_cases.publish import publish_event
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.domain.entities.event import APPOINTMENT_REQUESTED, AppointmentEvent


def _new_id() -> str:
    return uuid.uuid4().hex


class BookAppointmentUseCase:
    """
    Client booking request: validates the slot against business hours and
    policy, then checks conflicts and inserts in one store operation scoped
    to the day key, so two racing requests cannot both land.
    """

    def __init__(
        self,
        settings_store: SettingsStorePort,
        catalog: ServiceCatalogPort,
        appointments: AppointmentStorePort,
        notifier: NotificationPort | None = None,
        id_factory: Callable[[], str] = _new_id,
        read_attempts: int = 3,
    ) -> None:
        self._settings_store = settings_store
        self._catalog = catalog
        self._appointments = appointments
        self._notifier = notifier
        self._id_factory = id_factory
        self._read_attempts = read_attempts
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        user_id: str,
        service_id: str,
        start: datetime,
        now: datetime | None = None,
        notes: str | None = None,
    ) -> TransitionResult:
        now = now or utc_now()

        service = self._catalog.get_service(service_id)
        if service is None or not service.active:
            raise ServiceNotFound(service_id)

        settings = require_settings(self._settings_store, self._read_attempts)
        tz = resolve_timezone(settings.timezone)

        check_booking_policy(start, now, settings)

        day_key = day_key_of(start, tz)
        window = window_for(day_key, settings)
        if window is None:
            raise PolicyRejection(f"The calendar is closed on {day_key}")

        if start.second or start.microsecond:
            raise PolicyRejection("Appointment start must fall on a whole minute")

        duration = service.booking_duration
        offset = minute_of_day(start, tz)
        if offset not in generate_slots(window, settings.slot_interval_minutes, duration):
            raise PolicyRejection(f"{format_hhmm(offset)} on {day_key} is not a bookable time")

        end = start + timedelta(minutes=duration)
        appointment = Appointment(
            id=self._id_factory(),
            user_id=user_id,
            service_id=service.id,
            service_name=service.name,
            price=service.price,
            requested_start_at=start,
            day_key=day_key,
            duration_minutes=duration,
            notes=notes or None,
            status=AppointmentStatus.requested,
            created_at=now,
            updated_at=now,
        )

        try:
            self._appointments.insert_if_free(
                appointment,
                lambda existing: ensure_no_conflict(start, end, day_key, existing),
            )
        except ConflictError as e:
            self._logger.info(
                "Booking rejected: slot taken",
                extra={"day_key": day_key, "service": service.id, "conflicts": ",".join(e.conflicting_ids)},
            )
            raise

        result = TransitionResult(appointment, AppointmentEvent(type=APPOINTMENT_REQUESTED, appointment_id=appointment.id))
        self._logger.info(
            "Appointment requested",
            extra={"appointment_id": appointment.id, "day_key": day_key, "service": service.id},
        )
        publish_event(self._notifier, result)
        return result
