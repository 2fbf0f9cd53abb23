"""Write-back of minted links: Klaviyo purchase event and Shopify order note."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from booking_bridge.clients.klaviyo import KlaviyoClient
from booking_bridge.clients.shopify import ShopifyAdminClient
from booking_bridge.errors import AnnotationError, NotificationError, UpstreamError
from booking_bridge.models import SchedulingLink

logger = logging.getLogger(__name__)

NOTE_HEADER = "Scheduling Links:"


def normalize_time(value: datetime | None) -> str:
    """Render an order timestamp as ISO-8601 UTC; naive values are taken as UTC.

    A missing timestamp falls back to the current time.
    """
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def format_note(links: Sequence[SchedulingLink]) -> str:
    """Build the order note: a header line, then one `title: url` line per link."""
    lines = [f"{link.title}: {link.url}" for link in links]
    return "\n".join([NOTE_HEADER, *lines])


class MarketingNotifier:
    """Publishes the purchase event that drives the Klaviyo booking flow."""

    def __init__(self, klaviyo: KlaviyoClient, metric_name: str = "Purchase with Scheduling Link"):
        self._klaviyo = klaviyo
        self._metric_name = metric_name

    def notify(
        self,
        email: str,
        first_name: str,
        last_name: str,
        links: Sequence[SchedulingLink],
        order_id: int | str,
        order_time: datetime | None,
    ) -> None:
        profile = {
            "$email": email,
            "$first_name": first_name,
            "$last_name": last_name,
        }
        properties = {
            "order_id": order_id,
            "scheduling_links": [link.as_dict() for link in links],
            "scheduling_link_urls": [link.url for link in links],
        }
        try:
            self._klaviyo.create_event(
                self._metric_name, profile, properties, normalize_time(order_time)
            )
        except UpstreamError as e:
            raise NotificationError(f"Failed to track Klaviyo event for order {order_id}") from e
        logger.info("Tracked Klaviyo event for order %s (%d link(s))", order_id, len(links))


class OrderAnnotator:
    """Writes the links onto the order note through orderUpdate."""

    def __init__(self, shopify: ShopifyAdminClient):
        self._shopify = shopify

    def annotate(self, order_id: int | str, links: Sequence[SchedulingLink]) -> None:
        note = format_note(links)
        try:
            result = self._shopify.update_order_note(order_id, note)
        except UpstreamError as e:
            raise AnnotationError(f"Failed to update note on order {order_id}") from e

        user_errors = result.get("userErrors") or []
        if user_errors:
            logger.error(
                "orderUpdate user errors for order %s: %s", order_id, json.dumps(user_errors)
            )
            raise AnnotationError(
                f"orderUpdate rejected note for order {order_id}: "
                + "; ".join(str(err.get("message", err)) for err in user_errors)
            )
        if not result.get("order"):
            logger.error("orderUpdate returned no order for %s: %s", order_id, result)
            raise AnnotationError(f"orderUpdate returned no order for {order_id}")
        logger.info("Added %d scheduling link(s) to note of order %s", len(links), order_id)
