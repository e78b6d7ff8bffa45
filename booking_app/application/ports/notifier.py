from abc import ABC, abstractmethod

from booking_app.domain.entities.appointment import Appointment
from booking_app.domain.entities.event import AppointmentEvent


class NotificationPort(ABC):
    @abstractmethod
    def publish(self, event: AppointmentEvent, appointment: Appointment) -> None:
        """Fire-and-forget; implementations must not raise into the caller."""
        raise NotImplementedError
