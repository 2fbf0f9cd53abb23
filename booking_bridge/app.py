"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from booking_bridge import __version__
from booking_bridge.config import Settings, get_settings
from booking_bridge.pipeline import build_processor
from booking_bridge.webhooks.handlers import ProcessorFactory, register_webhook_routes


def create_app(
    settings: Settings | None = None,
    processor_factory: ProcessorFactory = build_processor,
) -> FastAPI:
    """Build the app. Tests pass their own settings and processor factory."""
    settings = settings or get_settings()
    app = FastAPI(title="booking-bridge", version=__version__)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    register_webhook_routes(app, settings, processor_factory)
    return app
