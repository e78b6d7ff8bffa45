
class SchedulingError(RuntimeError):
    """Base class for scheduling core failures."""
    pass


class ConfigurationError(SchedulingError):
    """Raised when provider settings are malformed (business hours, interval, timezone)."""
    pass


class PolicyRejection(SchedulingError):
    """Raised when a requested time falls outside the lead-time or horizon window."""
    pass


class ConflictError(SchedulingError):
    """Raised when the requested interval overlaps a blocking appointment."""

    def __init__(self, message: str, conflicting_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicting_ids = list(conflicting_ids or [])


class IllegalTransitionError(SchedulingError):
    """Raised when a state-machine transition is not allowed from the current status."""

    def __init__(self, appointment_id: str, current: str, action: str) -> None:
        super().__init__(f"Cannot {action} appointment {appointment_id} in status {current}")
        self.appointment_id = appointment_id
        self.current = current
        self.action = action


class StoreUnavailable(SchedulingError):
    """Raised when the document store fails or times out."""
    pass


class AppointmentNotFound(SchedulingError):
    pass


class ServiceNotFound(SchedulingError):
    pass


class PaymentGatewayError(SchedulingError):
    """Raised when the payment provider cannot be reached or returns bad data."""
    pass
