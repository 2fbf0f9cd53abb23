"""Shared fixtures for the booking-bridge test suite.

FakeUpstream stands in for Shopify, Calendly and Klaviyo behind a single
httpx.MockTransport, so the real clients run end to end without a network.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json

import httpx
import pytest

from booking_bridge.config import Settings

WEBHOOK_SECRET = "shopify-test-secret"
CALENDLY_USER_URI = "https://api.calendly.com/users/USER1"
CONSULT_EVENT_TYPE_URI = "https://api.calendly.com/event_types/ET-CONSULT"


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Compute a valid Shopify signature."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def order_payload(**overrides) -> dict:
    """A trimmed Shopify orders/create payload."""
    payload = {
        "id": 820982911946154508,
        "email": "jon@example.com",
        "created_at": "2024-03-01T10:15:00-05:00",
        "customer": {"id": 115310627314723954, "first_name": "Jon", "last_name": "Snow"},
        "line_items": [
            {"id": 1, "product_id": 111, "quantity": 2, "title": "Consultation"},
            {"id": 2, "product_id": 222, "quantity": 1, "title": "T-Shirt"},
        ],
    }
    payload.update(overrides)
    return payload


class FakeUpstream:
    """In-memory Shopify / Calendly / Klaviyo APIs."""

    def __init__(self):
        # product gid -> metafield dict (missing key -> product not found)
        self.metafields: dict[str, dict | None] = {}
        self.failing_products: set[str] = set()
        self.event_types: list[dict] = [
            {"uri": CONSULT_EVENT_TYPE_URI, "slug": "consult", "active": True},
            {"uri": "https://api.calendly.com/event_types/ET-OLD", "slug": "legacy", "active": False},
        ]
        self.fail_links_after: int | None = None
        self.fail_klaviyo = False
        self.order_user_errors: list[dict] = []
        self.order_update_null = False
        self.user_payload: object = {"resource": {"uri": CALENDLY_USER_URI}}

        self.links_created: list[dict] = []
        self.klaviyo_events: list[dict] = []
        self.order_notes: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def set_handle(self, product_id: int, handle: str) -> None:
        self.metafields[f"gid://shopify/Product/{product_id}"] = {
            "type": "single_line_text_field",
            "value": handle,
            "reference": None,
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host.endswith(".myshopify.com"):
            return self._shopify(request)
        if host == "api.calendly.com":
            return self._calendly(request)
        if host == "a.klaviyo.com":
            return self._klaviyo(request)
        return httpx.Response(404)

    def _shopify(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        query, variables = payload["query"], payload["variables"]
        if "productSchedulingMetafield" in query:
            gid = variables["id"]
            if gid in self.failing_products:
                return httpx.Response(500, json={"errors": "Internal error"})
            if gid not in self.metafields:
                return httpx.Response(200, json={"data": {"product": None}})
            product = {"id": gid, "metafield": self.metafields[gid]}
            return httpx.Response(200, json={"data": {"product": product}})
        if "orderUpdate" in query:
            if self.order_update_null:
                return httpx.Response(200, json={"data": {"orderUpdate": None}})
            order_input = variables["input"]
            if not self.order_user_errors:
                self.order_notes[order_input["id"]] = order_input["note"]
            result = {
                "order": {"id": order_input["id"], "note": order_input["note"]},
                "userErrors": self.order_user_errors,
            }
            return httpx.Response(200, json={"data": {"orderUpdate": result}})
        return httpx.Response(400, json={"errors": [{"message": "unknown operation"}]})

    def _calendly(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET" and path == "/users/me":
            return httpx.Response(200, json=self.user_payload)
        if request.method == "GET" and path == "/event_types":
            return httpx.Response(
                200,
                json={"collection": self.event_types, "pagination": {"next_page": None}},
            )
        if request.method == "POST" and path == "/scheduling_links":
            if self.fail_links_after is not None and len(self.links_created) >= self.fail_links_after:
                return httpx.Response(500, json={"title": "Internal Server Error", "message": "boom"})
            body = json.loads(request.content)
            self.links_created.append(body)
            url = f"https://calendly.com/d/link-{len(self.links_created)}"
            return httpx.Response(
                201,
                json={"resource": {"booking_url": url, "owner": body["owner"], "owner_type": "EventType"}},
            )
        return httpx.Response(404, json={"message": "not found"})

    def _klaviyo(self, request: httpx.Request) -> httpx.Response:
        if self.fail_klaviyo:
            return httpx.Response(400, json={"errors": [{"detail": "bad profile"}]})
        self.klaviyo_events.append(json.loads(request.content))
        return httpx.Response(202)


@pytest.fixture()
def settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(
        _env_file=None,
        shopify_webhook_secret=WEBHOOK_SECRET,
        shop_name="test-shop",
        admin_api_access_token="shpat_test",
        calendly_api_token="calendly-test",
        klaviyo_api_key="pk_test",
        webhook_address="https://hooks.example.com/webhooks/shopify/orders-create",
    )


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def signer():
    """sign(body, secret=WEBHOOK_SECRET) -> base64 HMAC header value."""
    return sign


@pytest.fixture()
def make_order():
    """order_payload(**overrides) -> dict."""
    return order_payload
