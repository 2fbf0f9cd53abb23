"""Webhook HTTP handler for Shopify orders/create.

Flow:
1. Read raw body (needed for HMAC verification)
2. Verify signature -> 401 on failure, nothing else runs
3. Parse the order -> 500 on malformed payload
4. Run the order pipeline in a worker thread -> 500 on any failure
5. Return 200 (also when no line item needed scheduling)

Security contract:
- Never return upstream error details to the webhook caller
- Log all webhook activity for audit trail
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from booking_bridge.config import Settings
from booking_bridge.errors import BookingBridgeError, ParseError
from booking_bridge.orders import InboundOrder, parse_order
from booking_bridge.pipeline import OrderProcessor, ProcessResult
from booking_bridge.webhooks.verification import TOPIC_HEADER, verify_request

logger = logging.getLogger(__name__)

ORDERS_CREATE_PATH = "/webhooks/shopify/orders-create"

ProcessorFactory = Callable[[Settings], OrderProcessor]

_ERROR_RESPONSE = {"status": "error"}


def _log_webhook(order_id: object, status: str, links: int = 0) -> None:
    """Audit log for webhook activity."""
    logger.info("WEBHOOK_AUDIT order=%s status=%s links=%d", order_id, status, links)


def _run_pipeline(
    processor_factory: ProcessorFactory, settings: Settings, order: InboundOrder
) -> ProcessResult:
    with processor_factory(settings) as processor:
        return processor.process(order)


async def handle_orders_create(
    request: Request, settings: Settings, processor_factory: ProcessorFactory
) -> JSONResponse:
    """Verify, parse and process one orders/create delivery."""
    start = time.time()

    body = await request.body()
    headers = {k.lower(): v for k, v in request.headers.items()}

    if not verify_request(body, headers, settings.shopify_webhook_secret):
        _log_webhook("unknown", "signature_failed")
        return JSONResponse({"status": "unauthorized"}, status_code=401)

    topic = headers.get(TOPIC_HEADER)
    if topic and topic != "orders/create":
        logger.warning("orders/create endpoint received topic %s", topic)

    try:
        order = parse_order(body)
    except ParseError as e:
        logger.error("Rejecting webhook with malformed order: %s", e)
        _log_webhook("unknown", "invalid_payload")
        return JSONResponse(_ERROR_RESPONSE, status_code=500)

    try:
        result = await run_in_threadpool(_run_pipeline, processor_factory, settings, order)
    except BookingBridgeError as e:
        logger.error("Order %s failed: %s (cause: %r)", order.id, e, e.__cause__)
        _log_webhook(order.id, "failed")
        return JSONResponse(_ERROR_RESPONSE, status_code=500)
    except Exception:
        logger.exception("Unexpected error processing order %s", order.id)
        _log_webhook(order.id, "failed")
        return JSONResponse(_ERROR_RESPONSE, status_code=500)

    elapsed_ms = (time.time() - start) * 1000
    logger.debug("Order %s processed in %.1fms", order.id, elapsed_ms)
    _log_webhook(order.id, "processed", len(result.links))

    return JSONResponse({"status": "ok", "links": len(result.links)}, status_code=200)


def register_webhook_routes(
    app: FastAPI, settings: Settings, processor_factory: ProcessorFactory
) -> None:
    """Register the orders/create endpoint. Non-POST methods get 405."""

    @app.post(ORDERS_CREATE_PATH)
    async def shopify_orders_create(request: Request):
        """Receive Shopify orders/create webhooks (signature-verified)."""
        return await handle_orders_create(request, settings, processor_factory)

    logger.info("Webhook route registered: %s", ORDERS_CREATE_PATH)
