from __future__ import annotations

import logging

from fastapi import HTTPException

from booking_app.application.exceptions import (
    AppointmentNotFound,
    ConfigurationError,
    ConflictError,
    IllegalTransitionError,
    PaymentGatewayError,
    PolicyRejection,
    SchedulingError,
    ServiceNotFound,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


def to_http_exception(e: SchedulingError) -> HTTPException:
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, IllegalTransitionError):
        logger.warning("Illegal transition", extra={"appointment_id": e.appointment_id, "reason": str(e)})
        return HTTPException(status_code=409, detail="This appointment can no longer be changed that way")
    if isinstance(e, (ConfigurationError, PolicyRejection)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, AppointmentNotFound):
        return HTTPException(status_code=404, detail=f"Appointment not found: {e}")
    if isinstance(e, ServiceNotFound):
        return HTTPException(status_code=404, detail=f"Service not found: {e}")
    if isinstance(e, StoreUnavailable):
        logger.error("Store unavailable", extra={"error": str(e)})
        return HTTPException(status_code=503, detail="Storage is temporarily unavailable, please retry")
    if isinstance(e, PaymentGatewayError):
        return HTTPException(status_code=502, detail=str(e))
    logger.exception("Unmapped scheduling error", extra={"error": str(e)})
    return HTTPException(status_code=500, detail="Internal error")
