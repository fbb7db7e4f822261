"""Routes a verified Stripe event to its handler, at most once per event id.

Per event id:
    unseen -> pending -> processed          (terminal; claim kept, replays are duplicates)
                      -> failed             (claim released, Stripe retry starts a new pending record)
    claimed already   -> duplicate          (no handler call)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from checkoutrelay.core.errors import HandlerError
from checkoutrelay.core.event_outcomes import (
    EVENT_OUTCOME_DUPLICATE,
    EVENT_OUTCOME_FAILED,
    EVENT_OUTCOME_PROCESSED,
)
from checkoutrelay.integrations.stripe.models import Event
from checkoutrelay.services.event_store import EventRecord, EventStore
from checkoutrelay.services.handlers import Handler
from checkoutrelay.services.ledger import IdempotencyLedger

logger = logging.getLogger(__name__)

REASON_DUPLICATE = "duplicate"
REASON_UNHANDLED = "unhandled_event_type"


@dataclass(frozen=True)
class DispatchResult:
    event_id: str
    processed: bool
    reason: Optional[str] = None


class Dispatcher:
    def __init__(
        self,
        ledger: IdempotencyLedger,
        store: EventStore,
        handlers: dict[str, Handler] | None = None,
    ) -> None:
        self.ledger = ledger
        self.store = store
        self._handlers: dict[str, Handler] = dict(handlers or {})

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type] = handler

    def handler_for(self, event_type: str) -> Handler | None:
        return self._handlers.get(event_type)

    async def dispatch(self, event: Event) -> DispatchResult:
        # 1) claim (atomic test-and-set)
        if not await self.ledger.try_claim(event.id):
            await self.store.append(EventRecord.from_event(event, outcome=EVENT_OUTCOME_DUPLICATE))
            logger.info("Event %s already processed (retry detected)", event.id)
            return DispatchResult(event_id=event.id, processed=False, reason=REASON_DUPLICATE)

        # 2) log as pending; a claim without a record must not survive
        try:
            await self.store.append(EventRecord.from_event(event))
        except BaseException:
            await self.ledger.release(event.id)
            raise

        # 3) route
        handler = self.handler_for(event.type)
        if handler is None:
            await self.store.update_outcome(event.id, EVENT_OUTCOME_PROCESSED)
            logger.info("Unhandled event type %s (%s); acknowledged", event.type, event.id)
            return DispatchResult(event_id=event.id, processed=False, reason=REASON_UNHANDLED)

        # any exit other than success (cancellation included) fails the record
        # and releases the claim, in that order
        try:
            await handler(event)
        except BaseException as e:
            error = f"{type(e).__name__}: {e}"
            try:
                await self.store.update_outcome(event.id, EVENT_OUTCOME_FAILED, error)
            finally:
                await self.ledger.release(event.id)

            if not isinstance(e, Exception):
                logger.warning("Processing of event %s interrupted (%s); claim released", event.id, error)
                raise
            logger.exception("Error processing event %s (%s)", event.id, event.type)
            raise HandlerError(event.id, error) from e

        await self.store.update_outcome(event.id, EVENT_OUTCOME_PROCESSED)
        logger.info("Successfully processed event: %s (%s)", event.id, event.type)
        return DispatchResult(event_id=event.id, processed=True)
