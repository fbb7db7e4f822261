"""Shared fixtures for the CheckoutRelay test suite."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from checkoutrelay.core.config import Settings
from checkoutrelay.main import create_app
from checkoutrelay.services.event_store import InMemoryEventStore
from checkoutrelay.services.ledger import InMemoryIdempotencyLedger
from helpers import WEBHOOK_SECRET, FakeSink


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        stripe_webhook_secret=WEBHOOK_SECRET,
        partner_coupon_code="PHENOM100",
        store_backend="memory",
        sink_backoff_base_sec=0,
    )


@pytest.fixture
def ledger() -> InMemoryIdempotencyLedger:
    return InMemoryIdempotencyLedger()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def client(test_settings, ledger, store, sink):
    app = create_app(test_settings, ledger=ledger, store=store, sinks=[sink])
    with TestClient(app) as c:
        yield c
