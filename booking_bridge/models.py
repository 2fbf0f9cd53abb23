"""Value objects passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SchedulingConfig:
    """How a product maps to a bookable Calendly event type."""

    event_handle: str
    event_type_uri: str


@dataclass(frozen=True)
class SchedulingLink:
    """One single-use booking link, minted for one purchased unit."""

    title: str
    url: str

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class WebhookSubscription:
    """A Shopify webhook subscription as reported by the Admin API."""

    id: str
    callback_url: str
    topic: str

    @classmethod
    def from_node(cls, node: dict) -> WebhookSubscription:
        endpoint = node.get("endpoint")
        if not isinstance(endpoint, dict):
            endpoint = {}
        callback_url = node.get("callbackUrl") or endpoint.get("callbackUrl", "")
        return cls(id=node.get("id", ""), callback_url=callback_url, topic=node.get("topic", ""))
