"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: telemetry, the shared outbound
HTTP client, the Firestore client and the trigger dispatcher workers.
No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from fieldops.core.config import get_settings
from fieldops.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from fieldops.infrastructure.services.trigger_dispatcher import build_trigger_dispatcher
from fieldops.shared.telemetry.logging import setup_logging
from fieldops.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (so httpx clients created afterwards are
    instrumented), outbound HTTP client, Firestore client, dispatcher.
    Shutdown order: dispatcher drain, HTTP client close, Firestore close,
    telemetry shutdown.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    if settings.telemetry_enabled:
        telemetry = TelemetryConfig(settings)
        if telemetry.start(app) is not None:
            set_telemetry(telemetry)

    # Shared client for webhook actions (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.webhook_timeout_seconds)
    app.state.trigger_dispatcher = None

    if init_firebase():
        dispatcher = build_trigger_dispatcher(
            get_firestore_client(), app.state.http_client, settings
        )
        await dispatcher.start()
        app.state.trigger_dispatcher = dispatcher
    else:
        logger.warning("Document store unavailable; workflow triggers disabled")

    yield

    # ---- Shutdown ----
    dispatcher = getattr(app.state, "trigger_dispatcher", None)
    if dispatcher is not None:
        await dispatcher.stop(settings.trigger_shutdown_timeout_seconds)
        app.state.trigger_dispatcher = None

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Outbound HTTP client closed")

    await close_firebase()

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
