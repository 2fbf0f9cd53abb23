"""Exception taxonomy for the order pipeline.

Only ConfigResolutionError is recoverable: the resolver swallows it and treats
the product as unschedulable. Everything else aborts the request with a
generic 500.
"""

from __future__ import annotations


class BookingBridgeError(Exception):
    """Base class for all pipeline errors."""


class ParseError(BookingBridgeError):
    """Raised when an order body is not well-formed or lacks required fields."""


class UpstreamError(BookingBridgeError):
    """Raised by an API client when a third-party call fails."""

    def __init__(self, service: str, message: str, status_code: int | None = None, detail=None):
        self.service = service
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{service}: {message}")


class ShopifyGraphQLError(UpstreamError):
    """Top-level `errors` returned by the Shopify GraphQL Admin API."""

    def __init__(self, errors: list):
        super().__init__("shopify", "GraphQL errors", status_code=200, detail=errors)
        self.errors = errors


class ConfigResolutionError(BookingBridgeError):
    """Raised inside the resolver when scheduling metadata cannot be used."""


class LinkCreationError(BookingBridgeError):
    """Raised when a scheduling link cannot be minted."""


class NotificationError(BookingBridgeError):
    """Raised when the purchase event cannot be published."""


class AnnotationError(BookingBridgeError):
    """Raised when the order note cannot be written."""
