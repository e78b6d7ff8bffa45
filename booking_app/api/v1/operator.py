from __future__ import annotations

import hmac

from fastapi import Header, HTTPException

from booking_app.core.config import settings


def require_operator(x_operator_key: str | None = Header(default=None)) -> None:
    """Operator-only routes; open when OPERATOR_API_KEY is unset."""
    expected = settings.OPERATOR_API_KEY
    if not expected:
        return
    if not x_operator_key or not hmac.compare_digest(x_operator_key, expected):
        raise HTTPException(status_code=403, detail="Operator key required")
