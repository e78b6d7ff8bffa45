#!/usr/bin/env python3
from __future__ import annotations

import argparse
import hashlib
import hmac
import json
from typing import Any

import httpx
from httpx import ConnectError


def build_payload(payment_id: str, event_type: str) -> dict[str, Any]:
    return {"type": event_type, "action": "payment.updated", "data": {"id": payment_id}}


def sign_body(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a test payment webhook POST")
    parser.add_argument("--url", default="http://127.0.0.1:8001/api/v1/webhooks/payments")
    parser.add_argument("--payment-id", required=True)
    parser.add_argument("--type", default="payment")
    parser.add_argument("--secret", default="", help="PAYMENT_WEBHOOK_SECRET for the signature")
    args = parser.parse_args()

    payload = build_payload(args.payment_id, args.type)
    body = json.dumps(payload).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if args.secret:
        headers["X-Signature"] = sign_body(args.secret, body)

    try:
        resp = httpx.post(args.url, content=body, headers=headers, timeout=10.0)
    except ConnectError:
        print("Connection refused. Is the FastAPI server running?")
        print("Try: uvicorn booking_app.main:app --reload --port 8001")
        return

    print(resp.status_code)
    if resp.text:
        print(resp.text)


if __name__ == "__main__":
    main()
