"""SQLAlchemy-backed ledger and event store (the durable option).

Sessions are sync; every call runs in a worker thread so the event loop keeps
accepting other webhooks while the DB is busy.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timezone

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from checkoutrelay.core.errors import EventRecordNotFound
from checkoutrelay.core.event_outcomes import EVENT_OUTCOME_DUPLICATE
from checkoutrelay.models.event_record import EventRecordRow
from checkoutrelay.models.ledger_claim import LedgerClaim
from checkoutrelay.services.event_lifecycle import apply_outcome_change
from checkoutrelay.services.event_store import EventRecord

logger = logging.getLogger(__name__)


# -----------------------------
# Ledger
# -----------------------------
def _try_claim(db: Session, event_id: str) -> bool:
    # UNIQUE(event_id)로 중복 방지 - 재시도/동시성 상황에서도 IntegrityError 캐치로 안전
    try:
        db.add(LedgerClaim(event_id=event_id))
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        return False


class SqlIdempotencyLedger:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _is_claimed(self, event_id: str) -> bool:
        with self._session_factory() as db:
            return db.get(LedgerClaim, event_id) is not None

    def _release(self, event_id: str) -> None:
        with self._session_factory() as db:
            db.execute(delete(LedgerClaim).where(LedgerClaim.event_id == event_id))
            db.commit()

    def _try_claim(self, event_id: str) -> bool:
        with self._session_factory() as db:
            claimed = _try_claim(db, event_id)
        if not claimed:
            logger.info("Event %s already claimed", event_id)
        return claimed

    def _count(self) -> int:
        with self._session_factory() as db:
            return int(db.execute(select(func.count()).select_from(LedgerClaim)).scalar_one())

    async def is_claimed(self, event_id: str) -> bool:
        return await asyncio.to_thread(self._is_claimed, event_id)

    async def claim(self, event_id: str) -> None:
        # idempotent: losing the race means it is already claimed
        await asyncio.to_thread(self._try_claim, event_id)

    async def release(self, event_id: str) -> None:
        await asyncio.to_thread(self._release, event_id)

    async def try_claim(self, event_id: str) -> bool:
        return await asyncio.to_thread(self._try_claim, event_id)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)


# -----------------------------
# Event store
# -----------------------------
def _row_to_record(row: EventRecordRow) -> EventRecord:
    received_at = row.received_at
    if received_at is not None and received_at.tzinfo is None:
        # SQLite drops tzinfo
        received_at = received_at.replace(tzinfo=timezone.utc)
    return EventRecord(
        event_id=row.event_id,
        event_type=row.event_type,
        created=row.created_at_provider,
        livemode=row.livemode,
        payload=row.payload,
        outcome=row.outcome,
        error=row.error,
        received_at=received_at,
    )


class SqlEventStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _append(self, record: EventRecord) -> None:
        row = EventRecordRow(
            event_id=record.event_id,
            event_type=record.event_type,
            outcome=record.outcome,
            error=record.error,
            livemode=record.livemode,
            created_at_provider=record.created,
            payload=record.payload,
            received_at=record.received_at,
        )
        with self._session_factory() as db:
            db.add(row)
            db.commit()

    def _update_outcome(self, event_id: str, outcome: str, error: str | None) -> None:
        with self._session_factory() as db:
            row = db.execute(
                select(EventRecordRow)
                .where(EventRecordRow.event_id == event_id)
                .where(EventRecordRow.outcome != EVENT_OUTCOME_DUPLICATE)
                .order_by(desc(EventRecordRow.id))
                .limit(1)
                .with_for_update()
            ).scalar_one_or_none()
            if row is None:
                raise EventRecordNotFound(f"No event record for {event_id}")

            apply_outcome_change(row, outcome, error)
            db.commit()

    def _recent(self, n: int) -> list[EventRecord]:
        with self._session_factory() as db:
            rows = db.execute(
                select(EventRecordRow).order_by(desc(EventRecordRow.id)).limit(n)
            ).scalars().all()
            return [_row_to_record(r) for r in reversed(rows)]

    def _count(self) -> int:
        with self._session_factory() as db:
            return int(db.execute(select(func.count()).select_from(EventRecordRow)).scalar_one())

    async def append(self, record: EventRecord) -> None:
        await asyncio.to_thread(self._append, record)

    async def update_outcome(self, event_id: str, outcome: str, error: str | None = None) -> None:
        await asyncio.to_thread(self._update_outcome, event_id, outcome, error)

    async def recent(self, n: int) -> list[EventRecord]:
        if n <= 0:
            return []
        return await asyncio.to_thread(self._recent, n)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)
