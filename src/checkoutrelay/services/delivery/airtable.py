from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import SecretStr

from checkoutrelay.core.errors import PermanentSinkError
from checkoutrelay.core.stripe_events import RECORD_KIND_CHECKOUT
from checkoutrelay.services.delivery.http import post_json_async
from checkoutrelay.services.records import NormalizedRecord

logger = logging.getLogger(__name__)

AIRTABLE_API_BASE = "https://api.airtable.com/v0"


class AirtableSink:
    """
    Tabular store: one row per record in a fixed, pre-provisioned table.
    The table is never created here.
    """

    name = "airtable"

    def __init__(
        self,
        api_key: SecretStr | str | None,
        base_id: str | None,
        table: str = "Payments",
        *,
        kinds: frozenset[str] = frozenset({RECORD_KIND_CHECKOUT}),
        timeout: float = 10,
    ) -> None:
        if isinstance(api_key, SecretStr):
            api_key = api_key.get_secret_value()
        self._api_key = api_key or None
        self._base_id = base_id
        self._table = table
        self._kinds = kinds
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"{AIRTABLE_API_BASE}/{self._base_id}/{quote(self._table, safe='')}"

    def accepts(self, kind: str) -> bool:
        return kind in self._kinds

    async def deliver(self, record: NormalizedRecord) -> None:
        if not self._api_key or not self._base_id:
            raise PermanentSinkError(self.name, "AIRTABLE_API_KEY / AIRTABLE_BASE_ID is not set")

        # typecast lets Airtable coerce select options / numbers
        body = {"fields": record.to_fields(), "typecast": True}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        await post_json_async(self.name, self.url, body, headers=headers, timeout=self._timeout)
        logger.info("Saved %s to Airtable table %s", record.kind, self._table)
