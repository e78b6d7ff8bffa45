from __future__ import annotations

import hmac
import logging


logger = logging.getLogger(__name__)


def verify_payment_signature(body: bytes, signature_header: str | None, secret: str | None, env: str) -> bool:
    """Check an `X-Signature: sha256=<hex>` header against HMAC-SHA256(secret, body)."""
    if not signature_header:
        if env.lower() in {"dev", "local"}:
            logger.warning("Missing signature header; accepting in dev mode")
            return True
        return False

    if not secret:
        logger.error("Missing webhook secret for signature verification")
        return False

    try:
        algo, signature = signature_header.split("=", 1)
    except ValueError:
        return False

    if algo.lower() != "sha256":
        return False

    expected = hmac.new(secret.encode("utf-8"), body, "sha256").hexdigest()
    return hmac.compare_digest(expected, signature.strip())
