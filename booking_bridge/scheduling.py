"""Scheduling configuration lookup and booking-link minting.

A product is schedulable when its scheduling metafield names an event handle
that matches the slug of one of the Calendly user's event types. The handle
lives either directly in the metafield value or, when the metafield is a
metaobject reference, in a field of the referenced metaobject. Both forms are
read with one GraphQL query.

Resolution degrades gracefully: any failure means "not schedulable" for that
product only. Link creation does not: a failed link aborts the order.
"""

from __future__ import annotations

import logging

from booking_bridge.clients.calendly import CalendlyClient
from booking_bridge.clients.shopify import ShopifyAdminClient
from booking_bridge.config import Settings
from booking_bridge.errors import ConfigResolutionError, LinkCreationError, UpstreamError
from booking_bridge.models import SchedulingConfig

logger = logging.getLogger(__name__)


class SchedulingConfigResolver:
    """Maps a product id to its Calendly event type, or None.

    One instance serves one order: the Calendly identity and event-type list
    are fetched at most once per instance.
    """

    def __init__(
        self,
        shopify: ShopifyAdminClient,
        calendly: CalendlyClient,
        metafield_namespace: str = "custom",
        metafield_key: str = "calendly_event",
        handle_field: str = "event_handle",
    ):
        self._shopify = shopify
        self._calendly = calendly
        self._namespace = metafield_namespace
        self._key = metafield_key
        self._handle_field = handle_field
        self._user_uri: str | None = None
        self._event_types: list[dict] | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, shopify: ShopifyAdminClient, calendly: CalendlyClient
    ) -> SchedulingConfigResolver:
        return cls(
            shopify,
            calendly,
            metafield_namespace=settings.metafield_namespace,
            metafield_key=settings.metafield_key,
            handle_field=settings.metaobject_handle_field,
        )

    def resolve(self, product_id: int | str | None) -> SchedulingConfig | None:
        """Return the product's scheduling config, or None if it needs none."""
        if product_id is None:
            return None

        try:
            handle = self._event_handle(product_id)
            if handle is None:
                logger.info("Product %s has no scheduling metafield", product_id)
                return None
            event_type_uri = self._event_type_uri(handle)
        except (UpstreamError, ConfigResolutionError) as e:
            logger.warning("Scheduling config for product %s unavailable: %s", product_id, e)
            return None

        if event_type_uri is None:
            logger.warning(
                "No active Calendly event type with slug %r (product %s)", handle, product_id
            )
            return None

        logger.info("Product %s schedules via %s (%s)", product_id, handle, event_type_uri)
        return SchedulingConfig(event_handle=handle, event_type_uri=event_type_uri)

    def _event_handle(self, product_id: int | str) -> str | None:
        metafield = self._shopify.product_scheduling_metafield(
            product_id, self._namespace, self._key
        )
        if not metafield:
            return None
        if not isinstance(metafield, dict):
            raise ConfigResolutionError(f"unexpected metafield shape: {metafield!r}")

        reference = metafield.get("reference")
        if reference:
            return self._handle_from_metaobject(reference)

        value = str(metafield.get("value") or "").strip()
        if not value:
            return None
        if value.startswith("gid://"):
            raise ConfigResolutionError(f"metafield points at {value} but the reference did not resolve")
        return value

    def _handle_from_metaobject(self, reference: dict) -> str:
        if not isinstance(reference, dict) or reference.get("__typename", "Metaobject") != "Metaobject":
            raise ConfigResolutionError(f"metafield reference is not a metaobject: {reference!r}")

        for field in reference.get("fields") or []:
            if isinstance(field, dict) and field.get("key") == self._handle_field:
                value = str(field.get("value") or "").strip()
                if value:
                    return value
                break
        raise ConfigResolutionError(
            f"metaobject {reference.get('id', '?')} has no {self._handle_field!r} value"
        )

    def _event_type_uri(self, handle: str) -> str | None:
        for event_type in self._list_event_types():
            if not isinstance(event_type, dict):
                continue
            if event_type.get("slug") == handle and event_type.get("active", True):
                return event_type.get("uri")
        return None

    def _list_event_types(self) -> list[dict]:
        if self._event_types is None:
            if self._user_uri is None:
                self._user_uri = self._calendly.current_user_uri()
            self._event_types = self._calendly.list_event_types(self._user_uri)
        return self._event_types


class SchedulingLinkFactory:
    """Mints one single-use booking link per call. Nothing is cached."""

    def __init__(self, calendly: CalendlyClient):
        self._calendly = calendly

    def create(self, event_type_uri: str, email: str, first_name: str, last_name: str) -> str:
        try:
            url = self._calendly.create_scheduling_link(event_type_uri, email, first_name, last_name)
        except UpstreamError as e:
            raise LinkCreationError(
                f"Failed to create Calendly scheduling link for {event_type_uri}"
            ) from e
        logger.info("Created Calendly scheduling link for %s", event_type_uri)
        return url
