import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from checkoutrelay.api.deps import get_dispatcher, get_settings
from checkoutrelay.api.raw_body import capture_raw_body
from checkoutrelay.api.v1.schemas.webhook import WebhookAck
from checkoutrelay.core.config import Settings
from checkoutrelay.core.errors import (
    AuthenticationError,
    HandlerError,
    InvalidPayload,
    TransportError,
)
from checkoutrelay.integrations.stripe.webhook import construct_event
from checkoutrelay.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["stripe"])


@router.post(
    "/webhook",
    response_model=WebhookAck,
    response_model_exclude_none=True,
    responses={400: {"description": "Missing/invalid signature or unreadable body"},
               500: {"description": "Handler failed; Stripe will retry"}},
)
async def stripe_webhook(
    request: Request,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
):
    # 1) Raw bytes + header (nothing parsed yet)
    try:
        raw = await capture_raw_body(request)
    except (TransportError, AuthenticationError) as e:
        logger.warning("Webhook rejected before verification: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    # 2) Verify + parse. Nothing is written until this passes.
    try:
        event = construct_event(
            raw.body,
            raw.signature,
            secret=settings.stripe_webhook_secret,
            tolerance=settings.webhook_tolerance_sec,
        )
    except (AuthenticationError, InvalidPayload) as e:
        raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

    # 3) Claim + log + handle
    try:
        result = await dispatcher.dispatch(event)
    except HandlerError as e:
        return JSONResponse(
            status_code=500,
            content={"detail": "Processing failed", "event_id": e.event_id},
        )

    return WebhookAck(
        processed=result.processed,
        event_id=result.event_id,
        reason=result.reason,
    )
