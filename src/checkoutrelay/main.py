from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI

from checkoutrelay.api.v1.routers.health import router as health_router
from checkoutrelay.api.v1.routers.stripe_webhook import router as stripe_router
from checkoutrelay.core.config import Settings, settings as default_settings
from checkoutrelay.core.errors import ConfigurationError
from checkoutrelay.core.logging_config import configure_logging
from checkoutrelay.services.delivery.airtable import AirtableSink
from checkoutrelay.services.delivery.base import DownstreamSink
from checkoutrelay.services.delivery.retry import RetryingSink
from checkoutrelay.services.delivery.zapier import ZapierSink
from checkoutrelay.services.dispatcher import Dispatcher
from checkoutrelay.services.event_store import EventStore, InMemoryEventStore
from checkoutrelay.services.handlers import default_handlers
from checkoutrelay.services.ledger import IdempotencyLedger, InMemoryIdempotencyLedger

logger = logging.getLogger(__name__)


def validate_settings(settings: Settings) -> None:
    if not settings.stripe_webhook_secret or not settings.stripe_webhook_secret.get_secret_value():
        raise ConfigurationError("STRIPE_WEBHOOK_SECRET is missing. Check your .env file.")
    if settings.store_backend == "sql" and settings.env == "local" and not (
        settings.database_url_override or settings.db_password
    ):
        raise ConfigurationError("DB_PASSWORD is missing. Check your .env file.")


def build_sinks(settings: Settings) -> list[DownstreamSink]:
    """Configured sinks, each wrapped with timeout + retry."""
    sinks: list[DownstreamSink] = []

    if settings.airtable_configured:
        sinks.append(
            AirtableSink(
                settings.airtable_api_key,
                settings.airtable_base_id,
                settings.airtable_table,
                timeout=settings.sink_timeout_sec,
            )
        )
    if settings.zapier_webhook_url:
        sinks.append(ZapierSink(settings.zapier_webhook_url, timeout=settings.sink_timeout_sec))

    if not sinks:
        logger.warning("No downstream sink configured; events will be logged only")

    return [
        RetryingSink(
            sink,
            max_attempts=settings.sink_max_attempts,
            timeout_sec=settings.sink_timeout_sec,
            base_delay=settings.sink_backoff_base_sec,
            max_delay=settings.sink_backoff_max_sec,
        )
        for sink in sinks
    ]


def build_backends(settings: Settings) -> tuple[IdempotencyLedger, EventStore]:
    if settings.store_backend == "sql":
        # 로컬 import: memory 모드에서는 DB 드라이버가 필요 없게
        from checkoutrelay.db.session import SessionLocal
        from checkoutrelay.services.sql_backends import SqlEventStore, SqlIdempotencyLedger

        return SqlIdempotencyLedger(SessionLocal), SqlEventStore(SessionLocal)

    return InMemoryIdempotencyLedger(), InMemoryEventStore()


def create_app(
    settings: Settings | None = None,
    *,
    ledger: IdempotencyLedger | None = None,
    store: EventStore | None = None,
    sinks: Sequence[DownstreamSink] | None = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        validate_settings(settings)

        app_ledger, app_store = ledger, store
        if app_ledger is None or app_store is None:
            built_ledger, built_store = build_backends(settings)
            app_ledger = built_ledger if app_ledger is None else app_ledger
            app_store = built_store if app_store is None else app_store

        app.state.settings = settings
        app.state.ledger = app_ledger
        app.state.store = app_store

        app.state.sinks = list(sinks) if sinks is not None else build_sinks(settings)
        app.state.dispatcher = Dispatcher(
            app.state.ledger,
            app.state.store,
            default_handlers(app.state.sinks, partner_code=settings.partner_coupon_code),
        )

        logger.info(
            "CheckoutRelay ready (backend=%s, sinks=%s)",
            settings.store_backend,
            [s.name for s in app.state.sinks] or "none",
        )
        yield

    app = FastAPI(title="CheckoutRelay", version="0.1.0", lifespan=lifespan)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(stripe_router, prefix="/api/v1")
    return app


app = create_app()
