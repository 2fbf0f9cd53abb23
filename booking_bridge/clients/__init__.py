"""Thin synchronous clients for the three upstream SaaS APIs."""

from booking_bridge.clients.calendly import CalendlyClient
from booking_bridge.clients.klaviyo import KlaviyoClient
from booking_bridge.clients.shopify import ShopifyAdminClient

__all__ = ["CalendlyClient", "KlaviyoClient", "ShopifyAdminClient"]
