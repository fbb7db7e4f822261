from __future__ import annotations

import logging

import stripe
from pydantic import SecretStr, ValidationError

from checkoutrelay.core.config import settings
from checkoutrelay.core.errors import InvalidPayload, SignatureInvalid
from checkoutrelay.integrations.stripe.models import Event

logger = logging.getLogger(__name__)


def _secret_value(secret: SecretStr | str | None) -> str:
    if isinstance(secret, SecretStr):
        return secret.get_secret_value()
    return secret or ""


def construct_event(
    payload: bytes,
    signature: str,
    *,
    secret: SecretStr | str | None = None,
    tolerance: int | None = None,
) -> Event:
    """
    Stripe signature 검증 + event 파싱.

    Verification runs over the exact bytes and writes nothing. Only after it
    passes is the body parsed into an Event.

    Raises:
        SignatureInvalid: bad/garbled header, mismatch, or stale timestamp.
        InvalidPayload: signature ok but body is not a Stripe event.
    """
    secret_str = _secret_value(secret if secret is not None else settings.stripe_webhook_secret)
    if not secret_str:
        # fail closed
        raise SignatureInvalid("Webhook secret is not configured")

    if tolerance is None:
        tolerance = settings.webhook_tolerance_sec

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SignatureInvalid("Payload is not valid UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(text, signature, secret_str, tolerance)
    except stripe.SignatureVerificationError as e:
        logger.warning("Stripe signature rejected: %s", str(e))
        raise SignatureInvalid(str(e)) from e

    try:
        return Event.model_validate_json(payload)
    except ValidationError as e:
        raise InvalidPayload(f"Invalid payload: {e.error_count()} validation error(s)") from e
