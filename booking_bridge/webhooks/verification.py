"""Shopify webhook signature verification.

Security contract:
- Digest is computed over the raw body bytes, never re-serialized JSON
- Comparison uses hmac.compare_digest() (constant-time)
- Missing header or empty secret -> verification fails (fail-closed)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-shopify-hmac-sha256"
TOPIC_HEADER = "x-shopify-topic"


def compute_signature(body: bytes, secret: str) -> str:
    """Return base64(HMAC-SHA256(secret, body))."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_shopify(body: bytes, signature_header: str | None, secret: str) -> bool:
    """Verify a Shopify webhook HMAC-SHA256 signature.

    Args:
        body: Raw request body bytes
        signature_header: Value of X-Shopify-Hmac-SHA256 header
        secret: Shared webhook secret from the app settings

    Returns:
        True if signature is valid
    """
    if not secret:
        logger.warning("SHOPIFY_WEBHOOK_SECRET not set, rejecting webhook")
        return False
    if not signature_header:
        return False

    expected = compute_signature(body, secret).encode("utf-8")
    return hmac.compare_digest(expected, signature_header.encode("utf-8"))


def verify_request(body: bytes, headers: dict[str, str], secret: str) -> bool:
    """Verify using a lowercase-keyed header mapping."""
    return verify_shopify(body, headers.get(SIGNATURE_HEADER), secret)
