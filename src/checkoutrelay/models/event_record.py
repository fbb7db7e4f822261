from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from checkoutrelay.db.base import Base


class EventRecordRow(Base):
    """One row per verified delivery of a Stripe event (audit log, never deleted)."""

    __tablename__ = "event_records"

    id: Mapped[int] = mapped_column(primary_key=True)

    # not unique: a retried / duplicate delivery gets its own row
    event_id: Mapped[str] = mapped_column(String(100), index=True)
    event_type: Mapped[str] = mapped_column(String(100), index=True)

    outcome: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    livemode: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at_provider: Mapped[int] = mapped_column(BigInteger)

    payload: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"))

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
