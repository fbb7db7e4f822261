"""Stripe-style signing, event payloads, and a fake sink for tests."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any

WEBHOOK_SECRET = "whsec_test_secret"


def sign(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Compute a valid Stripe-Signature header (v1 scheme)."""
    ts = timestamp or int(time.time())
    signed_payload = f"{ts}.".encode() + body
    sig = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def checkout_session(**overrides: Any) -> dict[str, Any]:
    session: dict[str, Any] = {
        "id": "cs_test_123",
        "object": "checkout.session",
        "customer": "cus_123",
        "subscription": "sub_123",
        "amount_total": 2000,
        "currency": "usd",
        "payment_status": "paid",
        "client_reference_id": None,
        "created": 1700000000,
        "metadata": {},
        "total_details": {"amount_discount": 0, "breakdown": {"discounts": [], "taxes": []}},
    }
    session.update(overrides)
    return session


def stripe_event(
    obj: dict[str, Any] | None = None,
    *,
    event_id: str = "evt_test_1",
    event_type: str = "checkout.session.completed",
) -> dict[str, Any]:
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": 1700000000,
        "livemode": False,
        "api_version": "2024-06-20",
        "data": {"object": obj if obj is not None else checkout_session()},
    }


def encode(event: dict[str, Any]) -> bytes:
    return json.dumps(event).encode()


class FakeSink:
    """In-process sink; records deliveries, optionally fails."""

    def __init__(self, name: str = "fake", *, fail_with: Exception | None = None, kinds: set[str] | None = None):
        self.name = name
        self.fail_with = fail_with
        self.kinds = kinds
        self.calls = 0
        self.delivered: list[Any] = []

    def accepts(self, kind: str) -> bool:
        return self.kinds is None or kind in self.kinds

    async def deliver(self, record: Any) -> None:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.delivered.append(record)
