"""Klaviyo Events API client (API-key authenticated, pinned revision)."""

from __future__ import annotations

from typing import Any

import httpx

from booking_bridge.clients.base import request_json
from booking_bridge.config import Settings

KLAVIYO_EVENTS_URL = "https://a.klaviyo.com/api/events/"


class KlaviyoClient:
    def __init__(
        self,
        api_key: str,
        revision: str = "2023-07-15",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._http = httpx.Client(
            headers={
                "Authorization": f"Klaviyo-API-Key {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "revision": revision,
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> KlaviyoClient:
        return cls(
            api_key=settings.klaviyo_api_key,
            revision=settings.klaviyo_revision,
            timeout=settings.http_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> KlaviyoClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def create_event(
        self,
        metric_name: str,
        profile: dict[str, Any],
        properties: dict[str, Any],
        time: str,
    ) -> None:
        """Publish one event against a profile. Klaviyo answers 202 with no body."""
        body = {
            "data": {
                "type": "event",
                "attributes": {
                    "metric": {"name": metric_name},
                    "profile": profile,
                    "properties": properties,
                    "time": time,
                },
            }
        }
        request_json(self._http, "klaviyo", "POST", KLAVIYO_EVENTS_URL, json=body)
