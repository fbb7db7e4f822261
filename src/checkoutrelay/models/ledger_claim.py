from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from checkoutrelay.db.base import Base


class LedgerClaim(Base):
    __tablename__ = "ledger_claims"

    # UNIQUE(event_id) is the test-and-set: a second INSERT raises IntegrityError
    event_id: Mapped[str] = mapped_column(String(100), primary_key=True)

    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
