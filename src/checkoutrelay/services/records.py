"""Normalized records derived from Stripe payloads.

Builders are pure functions: same payload in, same record out, nothing touched.
Amounts stay in Stripe minor units (cents); sinks that want major units convert.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from checkoutrelay.core.stripe_events import (
    RECORD_KIND_CHECKOUT,
    RECORD_KIND_PAYMENT,
    RECORD_KIND_SUBSCRIPTION,
)
from checkoutrelay.integrations.stripe.models import (
    CheckoutSession,
    Invoice,
    Subscription,
)

# Scanned in order against the lower-cased client_reference_id; first hit wins.
SOURCE_CHANNEL_KEYWORDS: tuple[str, ...] = ("social", "sms", "email", "phenom_landing")

UTM_FIELDS: tuple[str, ...] = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")


@dataclass(frozen=True)
class NormalizedCheckoutRecord:
    kind = RECORD_KIND_CHECKOUT

    stripe_session_id: str
    stripe_customer_id: Optional[str]
    stripe_subscription_id: Optional[str]
    price_id: Optional[str]
    product_id: Optional[str]
    amount_total: Optional[int]
    currency: Optional[str]
    payment_status: Optional[str]
    utm_source: str
    utm_medium: str
    utm_campaign: str
    utm_term: str
    utm_content: str
    source_channel: str
    phenom_code: str
    phenom_partner: bool
    created: Optional[int]

    def to_fields(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NormalizedSubscriptionRecord:
    kind = RECORD_KIND_SUBSCRIPTION

    stripe_subscription_id: str
    stripe_customer_id: Optional[str]
    plan_id: Optional[str]
    status: Optional[str]
    current_period_start: Optional[int]
    current_period_end: Optional[int]

    def to_fields(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NormalizedInvoiceRecord:
    kind = RECORD_KIND_PAYMENT

    stripe_invoice_id: str
    stripe_customer_id: Optional[str]
    stripe_subscription_id: Optional[str]
    amount_paid: Optional[int]
    currency: Optional[str]

    def to_fields(self) -> dict[str, Any]:
        return asdict(self)


NormalizedRecord = NormalizedCheckoutRecord | NormalizedSubscriptionRecord | NormalizedInvoiceRecord


# -----------------------------
# Checkout helpers
# -----------------------------
def detect_partner_code(session: CheckoutSession, partner_code: str) -> Optional[str]:
    """Exact, case-sensitive coupon id match. Stops at the first match."""
    if not partner_code:
        return None
    for item in session.discounts:
        coupon = item.discount.coupon if item.discount else None
        if coupon is not None and coupon.id == partner_code:
            return coupon.id
    return None


def infer_source_channel(metadata: Mapping[str, str], client_reference_id: Optional[str]) -> str:
    explicit = metadata.get("source_channel")
    if explicit:
        return explicit

    if not client_reference_id:
        return ""

    ref = client_reference_id.lower()
    for keyword in SOURCE_CHANNEL_KEYWORDS:
        if keyword in ref:
            return keyword
    return ""


def _as_session(payload: Mapping[str, Any] | CheckoutSession) -> CheckoutSession:
    if isinstance(payload, CheckoutSession):
        return payload
    return CheckoutSession.model_validate(payload)


# -----------------------------
# Builders
# -----------------------------
def build_checkout_record(
    payload: Mapping[str, Any] | CheckoutSession,
    *,
    partner_code: str,
) -> NormalizedCheckoutRecord:
    session = _as_session(payload)
    metadata = session.metadata

    first_item = session.first_line_item
    price = first_item.price if first_item else None

    matched_code = detect_partner_code(session, partner_code)
    utm = {name: metadata.get(name, "") for name in UTM_FIELDS}

    return NormalizedCheckoutRecord(
        stripe_session_id=session.id,
        stripe_customer_id=session.customer,
        stripe_subscription_id=session.subscription,
        price_id=price.id if price else None,
        product_id=price.product_id if price else None,
        amount_total=session.amount_total,
        currency=session.currency,
        payment_status=session.payment_status,
        source_channel=infer_source_channel(metadata, session.client_reference_id),
        phenom_code=matched_code or "",
        phenom_partner=matched_code is not None,
        created=session.created,
        **utm,
    )


def build_subscription_record(payload: Mapping[str, Any]) -> NormalizedSubscriptionRecord:
    sub = Subscription.model_validate(payload)

    plan_id = None
    if sub.items is not None and sub.items.data:
        price = sub.items.data[0].price
        plan_id = price.id if price else None

    return NormalizedSubscriptionRecord(
        stripe_subscription_id=sub.id,
        stripe_customer_id=sub.customer,
        plan_id=plan_id,
        status=sub.status,
        current_period_start=sub.current_period_start,
        current_period_end=sub.current_period_end,
    )


def build_invoice_record(payload: Mapping[str, Any]) -> NormalizedInvoiceRecord:
    invoice = Invoice.model_validate(payload)
    return NormalizedInvoiceRecord(
        stripe_invoice_id=invoice.id,
        stripe_customer_id=invoice.customer,
        stripe_subscription_id=invoice.subscription,
        amount_paid=invoice.amount_paid,
        currency=invoice.currency,
    )
