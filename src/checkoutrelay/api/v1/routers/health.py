from fastapi import APIRouter, Depends, Query

from checkoutrelay.api.deps import get_event_store, get_ledger, get_settings
from checkoutrelay.api.v1.schemas.webhook import EventRecordOut, EventsOut, HealthOut
from checkoutrelay.core.config import Settings
from checkoutrelay.services.event_store import EventStore
from checkoutrelay.services.ledger import IdempotencyLedger

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
async def health(
    ledger: IdempotencyLedger = Depends(get_ledger),
    store: EventStore = Depends(get_event_store),
):
    return HealthOut(
        status="ok",
        processed_events=await ledger.count(),
        logged_events=await store.count(),
    )


@router.get("/events", response_model=EventsOut)
async def recent_events(
    limit: int | None = Query(default=None, ge=1, le=200),
    ledger: IdempotencyLedger = Depends(get_ledger),
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings),
):
    records = await store.recent(limit or settings.events_recent_limit)
    return EventsOut(
        processed_count=await ledger.count(),
        logged_count=await store.count(),
        recent_events=[EventRecordOut.model_validate(r) for r in records],
    )
