"""Idempotent registration of the orders/create webhook subscription.

Check-before-create: an existing subscription for the same callback URL and
topic is left alone, so the bootstrap can be re-run any number of times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from booking_bridge.clients.shopify import ShopifyAdminClient
from booking_bridge.errors import ShopifyGraphQLError, UpstreamError
from booking_bridge.models import WebhookSubscription

logger = logging.getLogger(__name__)

ORDERS_CREATE_TOPIC = "ORDERS_CREATE"  # GraphQL enum value


@dataclass
class RegistrationResult:
    """Outcome of ensure_subscription: exists, created or error."""

    status: str
    subscription: WebhookSubscription | None = None
    errors: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in ("exists", "created")


def _error_detail(e: UpstreamError) -> list:
    if isinstance(e, ShopifyGraphQLError):
        return list(e.errors)
    return [{"message": str(e), "detail": e.detail}]


def ensure_subscription(
    client: ShopifyAdminClient, callback_url: str, topic: str = ORDERS_CREATE_TOPIC
) -> RegistrationResult:
    """Make sure exactly one subscription exists for (callback_url, topic)."""
    try:
        existing = client.webhook_subscriptions(topic, callback_url)
    except UpstreamError as e:
        logger.error("Could not list webhook subscriptions: %s", e)
        return RegistrationResult(status="error", errors=_error_detail(e))

    for subscription in existing:
        if subscription.callback_url == callback_url and subscription.topic == topic:
            logger.info("Webhook subscription already exists: %s", subscription.id)
            return RegistrationResult(status="exists", subscription=subscription)

    logger.info("No existing webhook found, creating %s -> %s", topic, callback_url)
    try:
        payload = client.create_webhook_subscription(topic, callback_url)
    except UpstreamError as e:
        logger.error("Could not create webhook subscription: %s", e)
        return RegistrationResult(status="error", errors=_error_detail(e))

    user_errors = payload.get("userErrors") or []
    if user_errors:
        logger.error("webhookSubscriptionCreate user errors: %s", user_errors)
        return RegistrationResult(status="error", errors=list(user_errors))

    node = payload.get("webhookSubscription")
    subscription = WebhookSubscription.from_node(node) if isinstance(node, dict) else None
    return RegistrationResult(status="created", subscription=subscription)
