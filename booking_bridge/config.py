"""Environment-driven settings for booking-bridge."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Secrets and tunables, read once and passed to each component.

    Field names match the deployment's environment variables
    case-insensitively (SHOPIFY_WEBHOOK_SECRET, SHOP_NAME, ...).
    """

    # Shopify
    shopify_webhook_secret: str = ""
    shop_name: str = ""
    admin_api_access_token: str = ""
    shopify_api_version: str = "2023-10"

    # Where the scheduling handle lives on a product
    metafield_namespace: str = "custom"
    metafield_key: str = "calendly_event"
    metaobject_handle_field: str = "event_handle"

    # Calendly
    calendly_api_token: str = ""
    calendly_base_url: str = "https://api.calendly.com"

    # Klaviyo
    klaviyo_api_key: str = ""
    klaviyo_revision: str = "2023-07-15"
    klaviyo_metric_name: str = "Purchase with Scheduling Link"

    # Webhook bootstrap
    webhook_address: str = ""

    http_timeout: float = 30.0
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler for command-line and server entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
