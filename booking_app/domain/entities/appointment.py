from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AppointmentStatus(str, Enum):
    requested = "requested"
    adjusted = "adjusted"
    awaiting_payment = "awaiting_payment"
    confirmed = "confirmed"
    cancelled = "cancelled"
    expired = "expired"


BLOCKING_STATUSES = frozenset(
    {
        AppointmentStatus.requested,
        AppointmentStatus.awaiting_payment,
        AppointmentStatus.confirmed,
    }
)

TERMINAL_STATUSES = frozenset({AppointmentStatus.cancelled, AppointmentStatus.expired})


@dataclass(frozen=True)
class Appointment:
    id: str
    user_id: str
    service_id: str
    service_name: str
    requested_start_at: datetime  # UTC, proposed by the client
    day_key: str  # YYYY-MM-DD in the provider timezone
    status: AppointmentStatus = AppointmentStatus.requested
    price: float | None = None
    final_start_at: datetime | None = None  # UTC, authoritative once set
    final_end_at: datetime | None = None
    duration_minutes: int | None = None
    notes: str | None = None
    admin_notes: str | None = None
    deposit_amount: float | None = None
    payment_due_at: datetime | None = None
    payment_id: str | None = None
    payment_status: str | None = None
    cancelled_by: str | None = None  # "client" | "operator"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def authoritative_start(self) -> datetime:
        return self.final_start_at or self.requested_start_at
