from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from booking_app.application.exceptions import AppointmentNotFound, IllegalTransitionError, PolicyRejection
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.ports.notifier import NotificationPort
from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.application.scheduling import state_machine
from booking_app.application.scheduling.conflicts import ensure_no_conflict
from booking_app.application.scheduling.state_machine import TransitionResult
from booking_app.application.scheduling.timezone import resolve_timezone, utc_now
from booking_app.application.use_cases.provider_settings import require_settings
from booking_app.application.use_cases.publish import publish_event
from booking_app.application.utils.retry import read_with_retry
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus


class AppointmentLifecycleUseCase:
    """Operator, client and payment-provider driven transitions of a single appointment."""

    def __init__(
        self,
        settings_store: SettingsStorePort,
        appointments: AppointmentStorePort,
        notifier: NotificationPort | None = None,
        payment_due_hours: int = 24,
        read_attempts: int = 3,
    ) -> None:
        self._settings_store = settings_store
        self._appointments = appointments
        self._notifier = notifier
        self._payment_due_hours = payment_due_hours
        self._read_attempts = read_attempts
        self._logger = logging.getLogger(__name__)

    def get(self, appointment_id: str) -> Appointment:
        appointment = read_with_retry(lambda: self._appointments.get(appointment_id), attempts=self._read_attempts)
        if appointment is None:
            raise AppointmentNotFound(appointment_id)
        return appointment

    def propose_adjustment(
        self,
        appointment_id: str,
        start: datetime,
        end: datetime | None = None,
        admin_notes: str | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        now = now or utc_now()
        current = self.get(appointment_id)
        if end is None:
            end = start + timedelta(minutes=current.duration_minutes or 60)

        tz = resolve_timezone(require_settings(self._settings_store, self._read_attempts).timezone)
        result = state_machine.propose_adjustment(current, start, end, now, tz, admin_notes)
        return self._commit(current, result, recheck=True)

    def approve(
        self,
        appointment_id: str,
        deposit_amount: float | None = None,
        admin_notes: str | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        now = now or utc_now()
        current = self.get(appointment_id)
        settings = require_settings(self._settings_store, self._read_attempts)

        payment_due_at = None
        if deposit_amount is not None:
            if not settings.payments_enabled:
                raise PolicyRejection("Payments are disabled; approve without a deposit")
            payment_due_at = now + timedelta(hours=self._payment_due_hours)

        result = state_machine.approve(
            current,
            now,
            resolve_timezone(settings.timezone),
            deposit_amount=deposit_amount,
            payment_due_at=payment_due_at,
            admin_notes=admin_notes,
        )
        return self._commit(current, result, recheck=False)

    def accept_adjustment(self, appointment_id: str, now: datetime | None = None) -> TransitionResult:
        current = self.get(appointment_id)
        result = state_machine.accept_adjustment(current, now or utc_now())
        # adjusted does not block, so the proposed time may have been taken meanwhile
        return self._commit(current, result, recheck=True)

    def reject_adjustment(self, appointment_id: str, now: datetime | None = None) -> TransitionResult:
        current = self.get(appointment_id)
        result = state_machine.reject_adjustment(current, now or utc_now())
        return self._commit(current, result, recheck=False)

    def cancel(self, appointment_id: str, by: str | None = None, now: datetime | None = None) -> TransitionResult:
        current = self.get(appointment_id)
        result = state_machine.cancel(current, now or utc_now(), by=by)
        return self._commit(current, result, recheck=False)

    def record_payment(
        self,
        appointment_id: str,
        payment_id: str | None = None,
        payment_status: str = "approved",
        now: datetime | None = None,
    ) -> TransitionResult:
        now = now or utc_now()
        current = self.get(appointment_id)
        result = state_machine.record_payment(current, now, payment_id=payment_id, payment_status=payment_status)
        if not result.changed:
            self._logger.info("Payment replay ignored", extra={"appointment_id": appointment_id})
            return result
        try:
            return self._commit(current, result, recheck=False)
        except IllegalTransitionError:
            # A concurrent delivery of the same webhook may have confirmed it first.
            latest = self.get(appointment_id)
            if latest.status == AppointmentStatus.confirmed:
                return TransitionResult(latest, None)
            raise

    def note_payment_status(
        self,
        appointment_id: str,
        payment_id: str,
        payment_status: str,
        now: datetime | None = None,
    ) -> Appointment:
        """Record a non-approved provider status without touching the lifecycle."""
        current = self.get(appointment_id)
        updated = replace(current, payment_id=payment_id, payment_status=payment_status, updated_at=now or utc_now())
        return self._appointments.update(updated, expected_status=current.status)

    def _commit(self, current: Appointment, result: TransitionResult, recheck: bool) -> TransitionResult:
        updated = result.appointment
        if recheck:
            start, end = updated.final_start_at, updated.final_end_at
            self._appointments.update_if_free(
                updated,
                expected_status=current.status,
                check=lambda existing: ensure_no_conflict(start, end, updated.day_key, existing, exclude_id=updated.id),
            )
        else:
            self._appointments.update(updated, expected_status=current.status)

        self._logger.info(
            "Appointment transitioned",
            extra={
                "appointment_id": updated.id,
                "day_key": updated.day_key,
                "status": updated.status.value,
                "previous_status": current.status.value,
            },
        )
        publish_event(self._notifier, result)
        return result
