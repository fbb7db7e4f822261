from __future__ import annotations

import logging

from checkoutrelay.core.config import settings
from checkoutrelay.core.logging_config import configure_logging
from checkoutrelay.db.init_db import create_all

logger = logging.getLogger(__name__)


def main() -> int:
    """Create event_records / ledger_claims (dev shortcut; production uses alembic)."""
    configure_logging(settings.log_level)
    create_all()
    logger.info("DB tables created (event_records, ledger_claims)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
