# Event types we act on. Everything else is acknowledged and logged only.
from typing import Final

CHECKOUT_SESSION_COMPLETED: Final[str] = "checkout.session.completed"
CUSTOMER_SUBSCRIPTION_CREATED: Final[str] = "customer.subscription.created"
INVOICE_PAYMENT_SUCCEEDED: Final[str] = "invoice.payment_succeeded"

HANDLED_EVENT_TYPES: Final[set[str]] = {
    CHECKOUT_SESSION_COMPLETED,
    CUSTOMER_SUBSCRIPTION_CREATED,
    INVOICE_PAYMENT_SUCCEEDED,
}

# Normalized record kinds (what sinks see as event_type)
RECORD_KIND_CHECKOUT: Final[str] = "checkout_completed"
RECORD_KIND_SUBSCRIPTION: Final[str] = "subscription_created"
RECORD_KIND_PAYMENT: Final[str] = "payment_succeeded"
