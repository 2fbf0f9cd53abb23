"""Shopify GraphQL Admin API client.

Covers the three admin concerns of the service: reading the scheduling
metafield of a product, writing the note of an order, and managing the
orders/create webhook subscription. GraphQL exclusively.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from booking_bridge.clients.base import as_object, request_json
from booking_bridge.config import Settings
from booking_bridge.errors import ShopifyGraphQLError
from booking_bridge.models import WebhookSubscription

logger = logging.getLogger(__name__)

PRODUCT_METAFIELD_QUERY = """
query productSchedulingMetafield($id: ID!, $namespace: String!, $key: String!) {
  product(id: $id) {
    id
    metafield(namespace: $namespace, key: $key) {
      type
      value
      reference {
        __typename
        ... on Metaobject {
          id
          handle
          fields {
            key
            value
          }
        }
      }
    }
  }
}
"""

ORDER_UPDATE_MUTATION = """
mutation orderUpdate($input: OrderInput!) {
  orderUpdate(input: $input) {
    order {
      id
      note
    }
    userErrors {
      field
      message
    }
  }
}
"""

WEBHOOK_SUBSCRIPTIONS_QUERY = """
query webhookSubscriptions($first: Int!, $callbackUrl: URL, $topic: WebhookSubscriptionTopic!) {
  webhookSubscriptions(first: $first, callbackUrl: $callbackUrl, topics: [$topic]) {
    edges {
      node {
        id
        topic
        endpoint {
          __typename
          ... on WebhookHttpEndpoint {
            callbackUrl
          }
        }
      }
    }
  }
}
"""

WEBHOOK_SUBSCRIPTION_CREATE_MUTATION = """
mutation webhookSubscriptionCreate($topic: WebhookSubscriptionTopic!, $callbackUrl: URL!) {
  webhookSubscriptionCreate(topic: $topic, webhookSubscription: {callbackUrl: $callbackUrl, format: JSON}) {
    webhookSubscription {
      id
      topic
      endpoint {
        __typename
        ... on WebhookHttpEndpoint {
          callbackUrl
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


def to_gid(resource: str, resource_id: int | str) -> str:
    """Convert a REST id to a GraphQL global id (idempotent for gids)."""
    value = str(resource_id)
    if value.startswith("gid://"):
        return value
    return f"gid://shopify/{resource}/{value}"


class ShopifyAdminClient:
    """Token-authenticated client for one shop's GraphQL Admin endpoint."""

    def __init__(
        self,
        shop_name: str,
        access_token: str,
        api_version: str = "2023-10",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.endpoint = f"https://{shop_name}.myshopify.com/admin/api/{api_version}/graphql.json"
        self._http = httpx.Client(
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> ShopifyAdminClient:
        return cls(
            shop_name=settings.shop_name,
            access_token=settings.admin_api_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.http_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ShopifyAdminClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        """Execute a GraphQL request and return its `data` object.

        Raises:
            UpstreamError: transport failure or non-2xx status.
            ShopifyGraphQLError: the response carried top-level `errors`.
        """
        payload = request_json(
            self._http,
            "shopify",
            "POST",
            self.endpoint,
            json={"query": query, "variables": variables or {}},
        )
        errors = payload.get("errors")
        if errors:
            logger.error("Shopify GraphQL errors: %s", json.dumps(errors))
            raise ShopifyGraphQLError(errors if isinstance(errors, list) else [errors])
        return as_object(payload.get("data"))

    def product_scheduling_metafield(
        self, product_id: int | str, namespace: str, key: str
    ) -> dict | None:
        """Return the product's scheduling metafield with its embedded reference.

        None when the product or the metafield does not exist.
        """
        data = self.graphql(
            PRODUCT_METAFIELD_QUERY,
            {"id": to_gid("Product", product_id), "namespace": namespace, "key": key},
        )
        product = data.get("product")
        if not isinstance(product, dict):
            logger.info("Product %s not found", product_id)
            return None
        return product.get("metafield")

    def update_order_note(self, order_id: int | str, note: str) -> dict:
        """Run orderUpdate and return its payload (`order`, `userErrors`)."""
        data = self.graphql(
            ORDER_UPDATE_MUTATION,
            {"input": {"id": to_gid("Order", order_id), "note": note}},
        )
        return as_object(data.get("orderUpdate"))

    def webhook_subscriptions(
        self, topic: str, callback_url: str | None = None, first: int = 100
    ) -> list[WebhookSubscription]:
        """List subscriptions for a topic, optionally filtered by callback URL."""
        data = self.graphql(
            WEBHOOK_SUBSCRIPTIONS_QUERY,
            {"first": first, "callbackUrl": callback_url, "topic": topic},
        )
        edges = as_object(data.get("webhookSubscriptions")).get("edges")
        if not isinstance(edges, list):
            edges = []
        nodes = [edge.get("node") for edge in edges if isinstance(edge, dict)]
        return [WebhookSubscription.from_node(node) for node in nodes if isinstance(node, dict)]

    def create_webhook_subscription(self, topic: str, callback_url: str) -> dict:
        """Run webhookSubscriptionCreate and return its payload."""
        data = self.graphql(
            WEBHOOK_SUBSCRIPTION_CREATE_MUTATION,
            {"topic": topic, "callbackUrl": callback_url},
        )
        return as_object(data.get("webhookSubscriptionCreate"))
