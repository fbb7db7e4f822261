"""Idempotency ledger: which Stripe event ids are currently claimed.

An id is claimed the moment its event is accepted and stays claimed forever,
unless processing fails, in which case it is released so Stripe's retry can
re-enter the pipeline.

`try_claim` is the only call the dispatcher uses for the duplicate decision: it
is a single test-and-set, so two concurrent deliveries of the same id can never
both win.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class IdempotencyLedger(Protocol):
    async def is_claimed(self, event_id: str) -> bool: ...

    async def claim(self, event_id: str) -> None: ...

    async def release(self, event_id: str) -> None: ...

    async def try_claim(self, event_id: str) -> bool: ...

    async def count(self) -> int: ...


class InMemoryIdempotencyLedger:
    """Process-local ledger (volatile; lost on restart)."""

    def __init__(self) -> None:
        self._claimed: set[str] = set()
        self._lock = asyncio.Lock()

    async def is_claimed(self, event_id: str) -> bool:
        async with self._lock:
            return event_id in self._claimed

    async def claim(self, event_id: str) -> None:
        async with self._lock:
            self._claimed.add(event_id)

    async def release(self, event_id: str) -> None:
        async with self._lock:
            self._claimed.discard(event_id)

    async def try_claim(self, event_id: str) -> bool:
        async with self._lock:
            if event_id in self._claimed:
                logger.info("Event %s already claimed", event_id)
                return False
            self._claimed.add(event_id)
            return True

    async def count(self) -> int:
        return len(self._claimed)
