from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentInfo:
    payment_id: str
    status: str  # provider status: approved, pending, rejected, ...
    external_reference: str | None  # appointment id


class PaymentGatewayPort(ABC):
    @abstractmethod
    def get_payment(self, payment_id: str) -> PaymentInfo:
        """Fetch the payment from the provider. Raises PaymentGatewayError."""
        raise NotImplementedError
