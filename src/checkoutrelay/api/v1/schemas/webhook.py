from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class WebhookAck(BaseModel):
    received: bool = True
    processed: bool
    event_id: str
    reason: Optional[str] = None


class EventRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    event_type: str
    outcome: str
    error: Optional[str] = None
    livemode: bool
    created: int
    received_at: datetime


class EventsOut(BaseModel):
    processed_count: int
    logged_count: int
    recent_events: list[EventRecordOut]


class HealthOut(BaseModel):
    status: str
    processed_events: int
    logged_events: int
