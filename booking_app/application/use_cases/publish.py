from __future__ import annotations

import logging

from booking_app.application.ports.notifier import NotificationPort
from booking_app.application.scheduling.state_machine import TransitionResult

logger = logging.getLogger(__name__)


def publish_event(notifier: NotificationPort | None, result: TransitionResult) -> None:
    """Hand the transition event to the notification side channel; failures are logged only."""
    if notifier is None or result.event is None:
        return
    try:
        notifier.publish(result.event, result.appointment)
    except Exception as e:
        logger.exception(
            "Notification publish failed",
            extra={"event": result.event.type, "appointment_id": result.event.appointment_id, "error": str(e)},
        )
