"""Order-created pipeline: resolve -> mint links -> notify -> annotate.

Strictly sequential. Line items are handled in order and, within an item,
one link per purchased unit. Nothing already done upstream is rolled back
when a later step fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from booking_bridge.clients.calendly import CalendlyClient
from booking_bridge.clients.klaviyo import KlaviyoClient
from booking_bridge.clients.shopify import ShopifyAdminClient
from booking_bridge.config import Settings
from booking_bridge.models import SchedulingLink
from booking_bridge.orders import InboundOrder
from booking_bridge.scheduling import SchedulingConfigResolver, SchedulingLinkFactory
from booking_bridge.sinks import MarketingNotifier, OrderAnnotator

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of one successfully processed order."""

    order_id: int | str
    links: list[SchedulingLink] = field(default_factory=list)
    notified: bool = False
    annotated: bool = False


class OrderProcessor:
    """Runs one order through the pipeline. Build a fresh one per request."""

    def __init__(
        self,
        resolver: SchedulingConfigResolver,
        link_factory: SchedulingLinkFactory,
        notifier: MarketingNotifier,
        annotator: OrderAnnotator,
        clients: list[Any] | None = None,
    ):
        self.resolver = resolver
        self.link_factory = link_factory
        self.notifier = notifier
        self.annotator = annotator
        self._clients = clients or []

    def process(self, order: InboundOrder) -> ProcessResult:
        """Mint, record and annotate the links for one order.

        Raises:
            LinkCreationError, NotificationError, AnnotationError: abort the
                order; earlier upstream effects stay in place.
        """
        result = ProcessResult(order_id=order.id)

        for item in order.line_items:
            config = self.resolver.resolve(item.product_id)
            if config is None:
                continue
            for ticket in range(1, item.quantity + 1):
                url = self.link_factory.create(
                    config.event_type_uri, order.email, order.first_name, order.last_name
                )
                result.links.append(SchedulingLink(title=f"{item.title} (Ticket {ticket})", url=url))

        if not result.links:
            logger.info("Order %s has no schedulable items, nothing to record", order.id)
            return result

        self.notifier.notify(
            order.email,
            order.first_name,
            order.last_name,
            result.links,
            order.id,
            order.created_at,
        )
        result.notified = True

        self.annotator.annotate(order.id, result.links)
        result.annotated = True

        logger.info("Order %s processed with %d scheduling link(s)", order.id, len(result.links))
        return result

    def close(self) -> None:
        for client in self._clients:
            client.close()

    def __enter__(self) -> OrderProcessor:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def build_processor(
    settings: Settings, transport: httpx.BaseTransport | None = None
) -> OrderProcessor:
    """Wire the pipeline against the APIs described by settings.

    `transport` replaces the network for all three clients (tests).
    """
    shopify = ShopifyAdminClient.from_settings(settings, transport=transport)
    calendly = CalendlyClient.from_settings(settings, transport=transport)
    klaviyo = KlaviyoClient.from_settings(settings, transport=transport)
    return OrderProcessor(
        resolver=SchedulingConfigResolver.from_settings(settings, shopify, calendly),
        link_factory=SchedulingLinkFactory(calendly),
        notifier=MarketingNotifier(klaviyo, metric_name=settings.klaviyo_metric_name),
        annotator=OrderAnnotator(shopify),
        clients=[shopify, calendly, klaviyo],
    )
