"""Idempotency ledger semantics (in-memory backend)."""

from __future__ import annotations

import asyncio

import pytest

from checkoutrelay.services.ledger import InMemoryIdempotencyLedger

pytestmark = pytest.mark.unit


class TestInMemoryLedger:
    @pytest.mark.asyncio
    async def test_unseen_id_not_claimed(self):
        ledger = InMemoryIdempotencyLedger()
        assert await ledger.is_claimed("evt_1") is False

    @pytest.mark.asyncio
    async def test_claim_then_is_claimed(self):
        ledger = InMemoryIdempotencyLedger()
        await ledger.claim("evt_1")
        assert await ledger.is_claimed("evt_1") is True

    @pytest.mark.asyncio
    async def test_claim_is_idempotent(self):
        ledger = InMemoryIdempotencyLedger()
        await ledger.claim("evt_1")
        await ledger.claim("evt_1")
        assert await ledger.count() == 1

    @pytest.mark.asyncio
    async def test_release_removes_claim(self):
        ledger = InMemoryIdempotencyLedger()
        await ledger.claim("evt_1")
        await ledger.release("evt_1")
        assert await ledger.is_claimed("evt_1") is False

    @pytest.mark.asyncio
    async def test_release_absent_is_noop(self):
        ledger = InMemoryIdempotencyLedger()
        await ledger.release("evt_missing")
        assert await ledger.count() == 0

    @pytest.mark.asyncio
    async def test_try_claim_wins_once(self):
        ledger = InMemoryIdempotencyLedger()
        assert await ledger.try_claim("evt_1") is True
        assert await ledger.try_claim("evt_1") is False

    @pytest.mark.asyncio
    async def test_try_claim_after_release_wins_again(self):
        ledger = InMemoryIdempotencyLedger()
        assert await ledger.try_claim("evt_1") is True
        await ledger.release("evt_1")
        assert await ledger.try_claim("evt_1") is True

    @pytest.mark.asyncio
    async def test_concurrent_try_claim_single_winner(self):
        ledger = InMemoryIdempotencyLedger()
        results = await asyncio.gather(*(ledger.try_claim("evt_race") for _ in range(50)))
        assert results.count(True) == 1

    @pytest.mark.asyncio
    async def test_distinct_ids_independent(self):
        ledger = InMemoryIdempotencyLedger()
        results = await asyncio.gather(*(ledger.try_claim(f"evt_{i}") for i in range(10)))
        assert all(results)
        assert await ledger.count() == 10
