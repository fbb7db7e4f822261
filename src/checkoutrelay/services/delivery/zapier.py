from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import SecretStr

from checkoutrelay.core.errors import PermanentSinkError
from checkoutrelay.services.delivery.http import post_json_async
from checkoutrelay.services.records import NormalizedRecord

logger = logging.getLogger(__name__)


class ZapierSink:
    """Automation relay: Zapier catch hook. Accepts every record kind."""

    name = "zapier"

    def __init__(self, webhook_url: SecretStr | str | None, *, timeout: float = 10) -> None:
        if isinstance(webhook_url, SecretStr):
            webhook_url = webhook_url.get_secret_value()
        self._url = webhook_url or None
        self._timeout = timeout

    def accepts(self, kind: str) -> bool:
        return True

    async def deliver(self, record: NormalizedRecord) -> None:
        if not self._url:
            raise PermanentSinkError(self.name, "ZAPIER_WEBHOOK_URL is not set")

        body = {
            "event_type": record.kind,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **record.to_fields(),
        }
        await post_json_async(self.name, self._url, body, timeout=self._timeout)
        logger.info("Forwarded %s to Zapier", record.kind)
