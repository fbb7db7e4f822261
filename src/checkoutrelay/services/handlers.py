from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence

from checkoutrelay.core.stripe_events import (
    CHECKOUT_SESSION_COMPLETED,
    CUSTOMER_SUBSCRIPTION_CREATED,
    INVOICE_PAYMENT_SUCCEEDED,
)
from checkoutrelay.integrations.stripe.models import Event
from checkoutrelay.services.delivery.base import DownstreamSink
from checkoutrelay.services.records import (
    NormalizedRecord,
    build_checkout_record,
    build_invoice_record,
    build_subscription_record,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Event], Awaitable[None]]


async def deliver_to_sinks(record: NormalizedRecord, sinks: Sequence[DownstreamSink]) -> int:
    """Deliver to every sink that takes this kind. First failure aborts (and fails the event)."""
    delivered = 0
    for sink in sinks:
        if not sink.accepts(record.kind):
            continue
        await sink.deliver(record)
        delivered += 1

    if delivered == 0:
        logger.info("No sink accepts %s records; nothing forwarded", record.kind)
    return delivered


class CheckoutCompletedHandler:
    def __init__(self, sinks: Sequence[DownstreamSink], *, partner_code: str) -> None:
        self.sinks = sinks
        self.partner_code = partner_code

    async def __call__(self, event: Event) -> None:
        record = build_checkout_record(event.payload, partner_code=self.partner_code)
        logger.info(
            "Checkout session completed: %s (partner=%s, channel=%s)",
            record.stripe_session_id,
            record.phenom_partner,
            record.source_channel or "-",
        )
        await deliver_to_sinks(record, self.sinks)


class RecordForwardingHandler:
    """Build with `builder`, then forward. Used for the non-checkout event types."""

    def __init__(
        self,
        builder: Callable[[Mapping[str, Any]], NormalizedRecord],
        sinks: Sequence[DownstreamSink],
    ) -> None:
        self.builder = builder
        self.sinks = sinks

    async def __call__(self, event: Event) -> None:
        record = self.builder(event.payload)
        logger.info("Processing %s: %s", event.type, event.payload.get("id"))
        await deliver_to_sinks(record, self.sinks)


def default_handlers(sinks: Sequence[DownstreamSink], *, partner_code: str) -> dict[str, Handler]:
    return {
        CHECKOUT_SESSION_COMPLETED: CheckoutCompletedHandler(sinks, partner_code=partner_code),
        CUSTOMER_SUBSCRIPTION_CREATED: RecordForwardingHandler(build_subscription_record, sinks),
        INVOICE_PAYMENT_SUCCEEDED: RecordForwardingHandler(build_invoice_record, sinks),
    }
