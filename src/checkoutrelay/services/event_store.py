"""Append-only audit log of verified events.

One EventRecord per delivery of a notification; `update_outcome` targets the most
recent non-duplicate record for an id (duplicate records are terminal markers). Not used for idempotency decisions (that is the ledger's job).
"""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from checkoutrelay.core.errors import EventRecordNotFound
from checkoutrelay.core.event_outcomes import EVENT_OUTCOME_DUPLICATE, EVENT_OUTCOME_PENDING
from checkoutrelay.integrations.stripe.models import Event
from checkoutrelay.services.event_lifecycle import apply_outcome_change


@dataclass
class EventRecord:
    event_id: str
    event_type: str
    created: int
    livemode: bool
    payload: dict[str, Any]
    outcome: str = EVENT_OUTCOME_PENDING
    error: Optional[str] = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_event(cls, event: Event, outcome: str = EVENT_OUTCOME_PENDING) -> "EventRecord":
        return cls(
            event_id=event.id,
            event_type=event.type,
            created=event.created,
            livemode=event.livemode,
            payload=copy.deepcopy(event.payload),
            outcome=outcome,
        )


class EventStore(Protocol):
    async def append(self, record: EventRecord) -> None: ...

    async def update_outcome(self, event_id: str, outcome: str, error: str | None = None) -> None: ...

    async def recent(self, n: int) -> list[EventRecord]: ...

    async def count(self) -> int: ...


class InMemoryEventStore:
    """Volatile store. Lost on restart."""

    def __init__(self) -> None:
        self._records: list[EventRecord] = []
        self._lock = asyncio.Lock()

    async def append(self, record: EventRecord) -> None:
        async with self._lock:
            self._records.append(record)

    async def update_outcome(self, event_id: str, outcome: str, error: str | None = None) -> None:
        async with self._lock:
            for record in reversed(self._records):
                if record.event_id == event_id and record.outcome != EVENT_OUTCOME_DUPLICATE:
                    apply_outcome_change(record, outcome, error)
                    return
        raise EventRecordNotFound(f"No event record for {event_id}")

    async def recent(self, n: int) -> list[EventRecord]:
        if n <= 0:
            return []
        async with self._lock:
            # deep copies; callers never hold a reference into the log
            return [replace(r, payload=copy.deepcopy(r.payload)) for r in self._records[-n:]]

    async def count(self) -> int:
        return len(self._records)
