"""Typed views over the parts of a Stripe event we actually read.

Only consumed fields are declared; everything else in the payload is ignored.
Stripe sends `null` for absent values, so most fields are Optional.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _StripeModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# -----------------------------
# Envelope
# -----------------------------
class EventData(_StripeModel):
    object: dict[str, Any]


class Event(_StripeModel):
    id: str
    type: str
    created: int
    livemode: bool = False
    data: EventData

    @property
    def payload(self) -> dict[str, Any]:
        return self.data.object


# -----------------------------
# Checkout session
# -----------------------------
class Coupon(_StripeModel):
    id: Optional[str] = None


class Discount(_StripeModel):
    coupon: Optional[Coupon] = None


class DiscountAmount(_StripeModel):
    amount: Optional[int] = None
    discount: Optional[Discount] = None


class Breakdown(_StripeModel):
    discounts: list[DiscountAmount] = Field(default_factory=list)


class TotalDetails(_StripeModel):
    amount_discount: Optional[int] = None
    breakdown: Optional[Breakdown] = None


class Price(_StripeModel):
    id: Optional[str] = None
    # id string, or the expanded product object
    product: Optional[str | dict[str, Any]] = None

    @property
    def product_id(self) -> Optional[str]:
        if isinstance(self.product, dict):
            return self.product.get("id")
        return self.product


class LineItem(_StripeModel):
    price: Optional[Price] = None


class LineItems(_StripeModel):
    data: list[LineItem] = Field(default_factory=list)


class CheckoutSession(_StripeModel):
    id: str
    customer: Optional[str] = None
    subscription: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    payment_status: Optional[str] = None
    client_reference_id: Optional[str] = None
    created: Optional[int] = None
    metadata: dict[str, str] = Field(default_factory=dict)
    total_details: Optional[TotalDetails] = None
    line_items: Optional[LineItems] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def discounts(self) -> list[DiscountAmount]:
        if self.total_details is None or self.total_details.breakdown is None:
            return []
        return self.total_details.breakdown.discounts

    @property
    def first_line_item(self) -> Optional[LineItem]:
        if self.line_items is None or not self.line_items.data:
            return None
        return self.line_items.data[0]


# -----------------------------
# Subscription / invoice
# -----------------------------
class SubscriptionItem(_StripeModel):
    price: Optional[Price] = None


class SubscriptionItems(_StripeModel):
    data: list[SubscriptionItem] = Field(default_factory=list)


class Subscription(_StripeModel):
    id: str
    customer: Optional[str] = None
    status: Optional[str] = None
    current_period_start: Optional[int] = None
    current_period_end: Optional[int] = None
    items: Optional[SubscriptionItems] = None


class Invoice(_StripeModel):
    id: str
    customer: Optional[str] = None
    subscription: Optional[str] = None
    amount_paid: Optional[int] = None
    currency: Optional[str] = None
