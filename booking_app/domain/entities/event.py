from dataclasses import dataclass


@dataclass(frozen=True)
class AppointmentEvent:
    type: str
    appointment_id: str


APPOINTMENT_REQUESTED = "appointment_requested"
APPOINTMENT_ADJUSTED = "appointment_adjusted"
APPOINTMENT_AWAITING_PAYMENT = "appointment_awaiting_payment"
APPOINTMENT_CONFIRMED = "appointment_confirmed"
APPOINTMENT_CANCELLED = "appointment_cancelled"
APPOINTMENT_EXPIRED = "appointment_expired"
