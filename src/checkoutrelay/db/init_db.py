from __future__ import annotations

from sqlalchemy import Engine

from checkoutrelay.db.base import Base

# 모델 import (Base에 테이블 등록되게)
from checkoutrelay.models import event_record, ledger_claim  # noqa: F401


def create_all(bind: Engine | None = None) -> None:
    if bind is None:
        from checkoutrelay.db.session import engine as bind
    Base.metadata.create_all(bind=bind)
