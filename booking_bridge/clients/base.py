"""Shared request helper for the upstream API clients.

Single attempt per call: no retry or backoff. Failures are logged with the
full upstream body and re-raised as UpstreamError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from booking_bridge.errors import UpstreamError

logger = logging.getLogger(__name__)


def request_json(http: httpx.Client, service: str, method: str, url: str, **kwargs: Any) -> dict:
    """Send one request and return the decoded JSON object ({} when empty)."""
    try:
        response = http.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error("%s %s %s -> HTTP %d: %s", service, method, url, status, e.response.text)
        raise UpstreamError(service, f"HTTP {status}", status_code=status, detail=e.response.text) from e
    except httpx.HTTPError as e:
        logger.error("%s %s %s failed: %s: %s", service, method, url, type(e).__name__, e)
        raise UpstreamError(service, f"{type(e).__name__}: {e}") from e

    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as e:
        logger.error("%s %s %s returned non-JSON body: %s", service, method, url, response.text)
        raise UpstreamError(
            service, "response is not JSON", status_code=response.status_code, detail=response.text
        ) from e

    if not isinstance(data, dict):
        logger.error("%s %s %s returned a non-object body: %s", service, method, url, response.text)
        raise UpstreamError(
            service, "response is not a JSON object", status_code=response.status_code, detail=data
        )
    return data


def as_object(value: Any) -> dict:
    """Return value when it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}
