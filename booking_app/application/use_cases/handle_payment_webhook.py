from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from booking_app.application.exceptions import AppointmentNotFound, IllegalTransitionError
from booking_app.application.ports.payment_gateway import PaymentGatewayPort
from booking_app.application.use_cases.manage_appointment import AppointmentLifecycleUseCase

APPROVED = "approved"


@dataclass(frozen=True)
class WebhookOutcome:
    action: str  # "ignored" | "confirmed" | "already_confirmed" | "recorded" | "rejected"
    appointment_id: str | None = None
    reason: str | None = None


class HandlePaymentWebhookUseCase:
    """
    Payment provider notification -> appointment confirmation.

    The notification only carries a payment id; the payment itself is read
    back from the provider and its external_reference names the appointment.
    """

    def __init__(self, gateway: PaymentGatewayPort, lifecycle: AppointmentLifecycleUseCase) -> None:
        self._gateway = gateway
        self._lifecycle = lifecycle
        self._logger = logging.getLogger(__name__)

    def execute(self, payload: dict[str, Any], now: datetime | None = None) -> WebhookOutcome:
        if payload.get("type") != "payment":
            return WebhookOutcome(action="ignored", reason="not_a_payment")

        payment_id = (payload.get("data") or {}).get("id")
        if not payment_id:
            raise ValueError("Payment notification without data.id")

        payment = self._gateway.get_payment(str(payment_id))
        appointment_id = payment.external_reference
        if not appointment_id:
            self._logger.error("Payment without external_reference", extra={"payment_id": payment.payment_id})
            return WebhookOutcome(action="ignored", reason="missing_reference")

        try:
            if payment.status != APPROVED:
                self._lifecycle.note_payment_status(appointment_id, payment.payment_id, payment.status, now=now)
                return WebhookOutcome(action="recorded", appointment_id=appointment_id, reason=payment.status)

            result = self._lifecycle.record_payment(
                appointment_id, payment_id=payment.payment_id, payment_status=payment.status, now=now
            )
        except AppointmentNotFound:
            self._logger.error("Appointment not found for payment", extra={"appointment_id": appointment_id})
            return WebhookOutcome(action="ignored", appointment_id=appointment_id, reason="appointment_not_found")
        except IllegalTransitionError as e:
            # e.g. paid after the deadline sweep expired it; needs a manual refund
            self._logger.error(
                "Payment for appointment that cannot be confirmed",
                extra={"appointment_id": appointment_id, "reason": str(e)},
            )
            return WebhookOutcome(action="rejected", appointment_id=appointment_id, reason=e.current)

        if not result.changed:
            return WebhookOutcome(action="already_confirmed", appointment_id=appointment_id)
        return WebhookOutcome(action="confirmed", appointment_id=appointment_id)
