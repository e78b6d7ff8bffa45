from __future__ import annotations

import logging

from booking_app.application.exceptions import PaymentGatewayError
from booking_app.application.ports.payment_gateway import PaymentGatewayPort, PaymentInfo


class MockPaymentGateway(PaymentGatewayPort):
    def __init__(self, payments: dict[str, PaymentInfo] | None = None) -> None:
        self._payments = dict(payments or {})
        self._logger = logging.getLogger(__name__)

    def register(self, payment: PaymentInfo) -> None:
        self._payments[payment.payment_id] = payment

    def get_payment(self, payment_id: str) -> PaymentInfo:
        payment = self._payments.get(payment_id)
        if payment is None:
            raise PaymentGatewayError(f"Unknown payment {payment_id}")
        self._logger.info("Mock payment fetched", extra={"payment_id": payment_id, "status": payment.status})
        return payment
