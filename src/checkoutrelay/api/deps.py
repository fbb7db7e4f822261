from fastapi import Request

from checkoutrelay.core.config import Settings
from checkoutrelay.services.dispatcher import Dispatcher
from checkoutrelay.services.event_store import EventStore
from checkoutrelay.services.ledger import IdempotencyLedger


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> Dispatcher:
    """FastAPI dependency: pipeline built in the app lifespan"""
    return request.app.state.dispatcher


def get_ledger(request: Request) -> IdempotencyLedger:
    return request.app.state.ledger


def get_event_store(request: Request) -> EventStore:
    return request.app.state.store
