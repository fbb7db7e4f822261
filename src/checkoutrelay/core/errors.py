"""Error taxonomy for the webhook pipeline.

- TransportError / AuthenticationError / InvalidPayload: request rejected with 400,
  nothing written anywhere.
- HandlerError: verified event failed in a handler or sink, ledger claim already
  released, respond 500 so Stripe retries.
- ConfigurationError: raised at startup only.

A duplicate delivery is not an error; it is acknowledged with processed=false.
"""

from __future__ import annotations


class WebhookError(Exception):
    """Base class for every error raised by the pipeline."""


# -----------------------------
# Request-level (400, no side effects)
# -----------------------------
class TransportError(WebhookError):
    pass


class IncompleteBody(TransportError):
    pass


class AuthenticationError(WebhookError):
    pass


class MissingSignatureHeader(AuthenticationError):
    def __init__(self, message: str = "Missing Stripe-Signature header") -> None:
        super().__init__(message)


class SignatureInvalid(AuthenticationError):
    pass


class InvalidPayload(WebhookError):
    """Signature was fine but the body is not a usable Stripe event."""


# -----------------------------
# Processing (500, claim released)
# -----------------------------
class HandlerError(WebhookError):
    def __init__(self, event_id: str, message: str) -> None:
        super().__init__(message)
        self.event_id = event_id


class SinkError(WebhookError):
    retryable: bool = False

    def __init__(self, sink: str, reason: str) -> None:
        super().__init__(f"{sink}: {reason}")
        self.sink = sink
        self.reason = reason


class TransientSinkError(SinkError):
    retryable = True


class PermanentSinkError(SinkError):
    retryable = False


class DeliveryExhausted(TransientSinkError):
    def __init__(self, sink: str, attempts: int, reason: str) -> None:
        super().__init__(sink, f"gave up after {attempts} attempts ({reason})")
        self.attempts = attempts


# -----------------------------
# Event store contract
# -----------------------------
class EventRecordNotFound(WebhookError):
    pass


class InvalidOutcomeTransition(WebhookError):
    pass


# -----------------------------
# Startup
# -----------------------------
class ConfigurationError(WebhookError):
    pass
