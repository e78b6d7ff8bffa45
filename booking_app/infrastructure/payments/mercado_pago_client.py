from __future__ import annotations

import logging

import httpx

from booking_app.application.exceptions import PaymentGatewayError
from booking_app.application.ports.payment_gateway import PaymentGatewayPort, PaymentInfo
from booking_app.core.config import settings


class MercadoPagoGateway(PaymentGatewayPort):
    """Reads payments back from the provider; the webhook body alone is not trusted."""

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token or settings.PAYMENT_ACCESS_TOKEN
        self._base_url = (base_url or settings.PAYMENT_API_BASE_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=timeout_seconds or settings.PAYMENT_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._access_token:
            raise ValueError("PAYMENT_ACCESS_TOKEN is required for the payment gateway")

    def get_payment(self, payment_id: str) -> PaymentInfo:
        url = f"{self._base_url}/v1/payments/{payment_id}"
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            response = self._client.get(url, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self._logger.error(
                "Payment lookup failed",
                extra={"payment_id": payment_id, "status_code": e.response.status_code},
            )
            raise PaymentGatewayError(f"Payment lookup failed with HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Payment lookup failed", extra={"payment_id": payment_id, "error": str(e)})
            raise PaymentGatewayError(f"Payment provider unavailable: {e}") from e

        status = data.get("status")
        if not status:
            raise PaymentGatewayError(f"Payment {payment_id} has no status")
        reference = data.get("external_reference")
        return PaymentInfo(
            payment_id=str(data.get("id") or payment_id),
            status=str(status),
            external_reference=str(reference) if reference else None,
        )
