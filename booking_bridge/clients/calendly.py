"""Calendly v2 API client (bearer-token authenticated)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from booking_bridge.clients.base import as_object, request_json
from booking_bridge.config import Settings
from booking_bridge.errors import UpstreamError

logger = logging.getLogger(__name__)

# Event types are listed in pages of this size
_PAGE_SIZE = 100


class CalendlyClient:
    """Identity, event-type listing and scheduling-link creation."""

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.calendly.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._http = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> CalendlyClient:
        return cls(
            api_token=settings.calendly_api_token,
            base_url=settings.calendly_base_url,
            timeout=settings.http_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> CalendlyClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def current_user_uri(self) -> str:
        """Return the URI of the user owning the API token."""
        data = request_json(self._http, "calendly", "GET", "/users/me")
        uri = as_object(data.get("resource")).get("uri")
        if not uri:
            raise UpstreamError("calendly", "users/me response has no resource.uri", detail=data)
        return uri

    def list_event_types(self, user_uri: str) -> list[dict]:
        """Return every event type owned by a user, following pagination."""
        event_types: list[dict] = []
        url = "/event_types"
        params: dict | None = {"user": user_uri, "count": _PAGE_SIZE}
        while url:
            data = request_json(self._http, "calendly", "GET", url, params=params)
            collection = data.get("collection")
            if isinstance(collection, list):
                event_types.extend(collection)
            # next_page is an absolute URL that already carries the query
            url = as_object(data.get("pagination")).get("next_page")
            params = None
        logger.debug("Listed %d Calendly event type(s) for %s", len(event_types), user_uri)
        return event_types

    def create_scheduling_link(
        self, owner_uri: str, email: str, first_name: str, last_name: str
    ) -> str:
        """Create a single-use scheduling link and return its booking URL."""
        body = {
            "max_event_count": 1,
            "owner": owner_uri,
            "owner_type": "EventType",
            "invitee": {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
            },
        }
        data = request_json(self._http, "calendly", "POST", "/scheduling_links", json=body)
        booking_url = as_object(data.get("resource")).get("booking_url")
        if not booking_url:
            logger.error("Calendly scheduling link response missing booking_url: %s", data)
            raise UpstreamError("calendly", "scheduling link has no booking_url", detail=data)
        return booking_url
