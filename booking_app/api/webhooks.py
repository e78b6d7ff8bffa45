from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response

from booking_app.api.errors import to_http_exception
from booking_app.api.v1.schemas import WebhookResponseSchema
from booking_app.application.exceptions import SchedulingError
from booking_app.infrastructure.payments.webhook_verify import verify_payment_signature
from booking_app.wiring.dependencies import get_payment_webhook_use_case
from booking_app.core.config import settings


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhooks/payments")
async def payment_webhook(request: Request):
    body = await request.body()
    signature = request.headers.get("X-Signature")
    if not verify_payment_signature(body, signature, settings.PAYMENT_WEBHOOK_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)
    if not isinstance(payload, dict):
        return Response(status_code=400)

    try:
        use_case = get_payment_webhook_use_case()
    except ValueError as e:
        logger.exception("Failed to initialize use case", extra={"error": str(e)})
        return Response(status_code=500)

    try:
        outcome = use_case.execute(payload)
    except ValueError as e:
        logger.warning("Malformed payment notification", extra={"reason": str(e)})
        return Response(status_code=400)
    except SchedulingError as e:
        # non-2xx makes the provider redeliver; handling is idempotent
        raise to_http_exception(e)

    logger.info(
        "Payment webhook handled",
        extra={"appointment_id": outcome.appointment_id, "reason": outcome.reason, "event": outcome.action},
    )
    return WebhookResponseSchema(
        action=outcome.action, appointment_id=outcome.appointment_id, reason=outcome.reason
    ).model_dump(by_alias=True)
